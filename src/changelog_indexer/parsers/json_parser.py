"""
JSON parser
"""
import json
from typing import Any

from .base_parser import BaseParser
from ..models.schemas import ContentKind, ExtractionOptions
from ..exceptions import ParserException


def _value_to_text(value: Any) -> str:
    if value is None or value == "" or value is False:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


class JSONParser(BaseParser):
    """Re-serializes JSON, or projects selected top-level properties"""

    kind = ContentKind.JSON

    def parse(self, file_content: bytes, options: ExtractionOptions) -> str:
        try:
            data = json.loads(self._decode(file_content))
        except json.JSONDecodeError as e:
            raise ParserException("Invalid JSON content", original_error=e)

        if options.json_properties:
            values = data if isinstance(data, dict) else {}
            return " ".join(_value_to_text(values.get(prop)) for prop in options.json_properties)

        if options.json_indent is not None:
            return json.dumps(data, indent=options.json_indent, ensure_ascii=False)
        return json.dumps(data, separators=(',', ':'), ensure_ascii=False)
