"""
Inline JSON Extractor - competitor payloads embedded in the served HTML
Some SPA builds ship their initial state as window.__DATA__ = {...}
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from .field_mapper import FieldMapper, clean_cells
from .models import CompetitorRecord, RawRow

logger = logging.getLogger(__name__)

# Structured keys in column-contract order, used when an item carries no raw cells
START_LIST_KEYS = ('startTime', 'name', 'club', 'country', 'bib', 'card')
RESULTS_KEYS = ('rank', 'bib', 'name', 'country', 'finalTime')


class InlineDataExtractor:
    """
    Finds competitor lists in inline script payloads.

    JSON blocks are cut out with a string-aware brace matcher rather than
    a greedy regex, so "</script>" or "}" inside string values do not
    truncate the payload.
    """

    def __init__(self, field_mapper: Optional[FieldMapper] = None):
        self.field_mapper = field_mapper or FieldMapper()

        self.assignment_patterns = [
            re.compile(r'window\.__DATA__\s*=\s*'),
            re.compile(r'window\.__INITIAL_STATE__\s*=\s*'),
        ]
        self.json_script_pattern = re.compile(
            r'<script[^>]*type=["\']application/json["\'][^>]*>(.*?)</script>',
            re.IGNORECASE | re.DOTALL
        )

    def extract_payloads(self, html: str) -> List[Dict[str, Any]]:
        """All JSON objects found in known inline-data locations"""
        payloads: List[Dict[str, Any]] = []
        if not html:
            return payloads

        for pattern in self.assignment_patterns:
            for match in pattern.finditer(html):
                block = extract_balanced_block(html, match.end())
                data = _loads(block)
                if isinstance(data, dict):
                    payloads.append(data)

        for match in self.json_script_pattern.finditer(html):
            data = _loads(match.group(1).strip())
            if isinstance(data, dict):
                payloads.append(data)

        return payloads

    def extract_competitors(self, html: str) -> Optional[List[CompetitorRecord]]:
        """
        Competitor records from the first payload carrying a competitors list

        Returns:
            Records, or None when no inline payload has competitors
        """
        for payload in self.extract_payloads(html):
            items = payload.get('competitors')
            if not isinstance(items, list):
                continue

            rows = [row for row in (self._item_to_row(item) for item in items) if row is not None]
            logger.info(f"Found inline competitor payload with {len(rows)} rows")
            return self.field_mapper.project_page(rows)

        return None

    @staticmethod
    def _item_to_row(item: Any) -> Optional[RawRow]:
        if isinstance(item, list):
            return clean_cells(_text(v) for v in item)

        if not isinstance(item, dict):
            return None

        cells = item.get('cells')
        if isinstance(cells, list):
            return clean_cells(_text(v) for v in cells)

        structured = item.get('structured') if isinstance(item.get('structured'), dict) else item
        keys = RESULTS_KEYS if structured.get('rank') not in (None, '') else START_LIST_KEYS
        return clean_cells(_text(structured.get(k)) for k in keys)


def extract_balanced_block(text: str, start_index: int) -> Optional[str]:
    """
    Extract a balanced JSON block ({...} or [...]) starting at start_index
    """
    while start_index < len(text) and text[start_index].isspace():
        start_index += 1

    if start_index >= len(text):
        return None

    start_char = text[start_index]
    if start_char == '{':
        end_char = '}'
    elif start_char == '[':
        end_char = ']'
    else:
        return None

    stack = 1
    in_string = False
    escape = False

    for i in range(start_index + 1, len(text)):
        char = text[i]

        if escape:
            escape = False
            continue

        if char == '\\':
            escape = True
            continue

        if char == '"':
            in_string = not in_string
            continue

        if not in_string:
            if char == start_char:
                stack += 1
            elif char == end_char:
                stack -= 1
                if stack == 0:
                    return text[start_index:i + 1]

    return None


def _loads(block: Optional[str]) -> Any:
    if not block:
        return None
    try:
        return json.loads(block)
    except json.JSONDecodeError:
        return None


def _text(value: Any) -> str:
    return '' if value is None else str(value)
