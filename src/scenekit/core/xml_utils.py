"""XML document helpers shared by resources and scene files."""

from __future__ import annotations

from pathlib import Path
from typing import Optional
from xml.dom import minidom
from xml.etree.ElementTree import Element, ParseError, SubElement, fromstring, tostring

from ..config.settings import XML_INDENT


def xml_to_string(root: Element) -> str:
    """Convert an ElementTree Element to a pretty-printed XML string."""
    rough = tostring(root, encoding='unicode')
    parsed = minidom.parseString(rough)
    return parsed.toprettyxml(indent=XML_INDENT, encoding=None)


def xml_add_attribute(parent: Element, name: str, value: str) -> Element:
    """Add an <attribute name="..." value="..." /> element."""
    return SubElement(parent, "attribute", name=name, value=value)


def xml_get_float(element: Element, name: str, default: float) -> float:
    """
    Read a float XML attribute.

    Raises:
        ValueError: If the attribute is present but not a number
    """
    text = element.get(name)
    if text is None or not text.strip():
        return default
    return float(text)


def write_xml_file(root: Element, filepath) -> None:
    """Write an XML element tree to a file with pretty formatting."""
    content = xml_to_string(root)
    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(content)


def read_xml_file(filepath) -> Optional[Element]:
    """
    Parse an XML file and return its root element.

    The XML declaration decides the encoding.

    Returns:
        Root element, or None if the file can not be read or is not
        well-formed XML
    """
    try:
        return fromstring(Path(filepath).read_bytes())
    except (OSError, ParseError, UnicodeDecodeError):
        return None
