"""
XML parser using ElementTree

Documents are converted to the usual XML-to-JSON shape: child elements are
grouped into lists by tag, attributes live under ``$`` and text mixed with
children under ``_``. Leaf elements without attributes become plain strings.
"""
import json
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional

from .base_parser import BaseParser
from ..models.schemas import ContentKind, ExtractionOptions
from ..exceptions import ParserException


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1] if tag.startswith('{') else tag


def _element_to_value(element: ET.Element) -> Any:
    children = list(element)
    text = "".join([element.text or ""] + [child.tail or "" for child in children])
    has_text = bool(text.strip())

    if not children and not element.attrib:
        return text if has_text else ""

    node: Dict[str, Any] = {}
    if element.attrib:
        node['$'] = {_local_name(k): v for k, v in element.attrib.items()}
    if has_text:
        node['_'] = text.strip() if children else text
    for child in children:
        node.setdefault(_local_name(child.tag), []).append(_element_to_value(child))
    return node


def xml_to_dict(root: ET.Element) -> Dict[str, Any]:
    return {_local_name(root.tag): _element_to_value(root)}


def _stringify(value: Any) -> str:
    if isinstance(value, list):
        return ",".join(_stringify(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def resolve_path(tree: Dict[str, Any], path: str) -> Optional[str]:
    """
    Walk a dotted key path, e.g. ``catalog.book.0.title``

    Numeric segments index into lists. A missing or empty segment yields None.
    """
    current: Any = tree
    for part in path.split('.'):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            current = None
        if current is None or current == "":
            return None
    return _stringify(current)


class XMLParser(BaseParser):
    """Serializes XML as JSON, or joins the values at the requested paths"""

    kind = ContentKind.XML

    def parse(self, file_content: bytes, options: ExtractionOptions) -> str:
        try:
            root = ET.fromstring(file_content)
        except ET.ParseError as e:
            raise ParserException("Invalid XML content", original_error=e)

        tree = xml_to_dict(root)

        if not options.xml_paths:
            return json.dumps(tree, separators=(',', ':'), ensure_ascii=False)

        values: List[str] = []
        for path in options.xml_paths:
            value = resolve_path(tree, path)
            if value:
                values.append(value)
            else:
                self.logger.debug(f"XML path not found: {path}")
        return " ".join(values)
