"""
Resource

Base class for named, shareable data loaded from XML documents.
"""

from __future__ import annotations

import logging
from pathlib import Path
from xml.etree.ElementTree import Element

from .xml_utils import read_xml_file, write_xml_file

logger = logging.getLogger(__name__)


class Resource:
    """
    Named data resource.

    A resource with an empty name is anonymous: it lives inline in the
    document of whoever owns it rather than in the resource cache.
    """

    # Root element name used when the resource is written to its own file
    ROOT_ELEMENT = "resource"

    def __init__(self, name: str = ""):
        self.name = name

    def is_anonymous(self) -> bool:
        return not self.name

    def load_xml(self, source: Element) -> bool:
        raise NotImplementedError

    def save_xml(self, dest: Element) -> bool:
        raise NotImplementedError

    def load_file(self, path: Path | str) -> bool:
        """
        Load the resource from an XML file.

        Returns:
            True on success
        """
        root = read_xml_file(path)
        if root is None:
            logger.error("Could not read %s file %s", type(self).__name__, path)
            return False
        return self.load_xml(root)

    def save_file(self, path: Path | str) -> bool:
        """Save the resource to a pretty-printed XML file."""
        root = Element(self.ROOT_ELEMENT)
        if not self.save_xml(root):
            return False
        write_xml_file(root, path)
        return True

    def __repr__(self):
        return f"{type(self).__name__}(name='{self.name}')"
