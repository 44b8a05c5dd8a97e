"""Minimal SVG document model built on ``xml.etree.ElementTree``."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass

from grid_composer.constants import SVG_NAMESPACE, XLINK_NAMESPACE
from grid_composer.utils import format_number


def svg_element(
    tag: str,
    parent: ET.Element | None = None,
    /,
    **attrs: str | float | None,
) -> ET.Element:
    """
    Create an element, optionally appending it to ``parent``.

    Keyword names map to attribute names with ``_`` replaced by ``-``;
    ``None`` values are skipped and numbers are formatted compactly.
    """
    attrib: dict[str, str] = {}
    for key, value in attrs.items():
        if value is None:
            continue
        name = key.replace("_", "-")
        attrib[name] = (
            value if isinstance(value, str) else format_number(value)
        )
    if parent is None:
        return ET.Element(tag, attrib)
    return ET.SubElement(parent, tag, attrib)


@dataclass
class SvgDocument:
    """An SVG root element with its declared pixel dimensions."""

    width: int
    height: int
    root: ET.Element

    @classmethod
    def create(cls, width: int, height: int) -> SvgDocument:
        """Return an empty document of the given size."""
        root = ET.Element("svg", {
            "width": str(width),
            "height": str(height),
            "xmlns": SVG_NAMESPACE,
            "xmlns:xlink": XLINK_NAMESPACE,
        })
        return cls(width=width, height=height, root=root)

    def to_string(self) -> str:
        """Serialize the document to an SVG string."""
        return ET.tostring(self.root, encoding="unicode")

    def to_bytes(self) -> bytes:
        """Serialize the document to UTF-8 bytes."""
        return self.to_string().encode("utf-8")
