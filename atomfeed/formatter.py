"""
XML formatting for deterministic Atom output.
"""

from datetime import datetime
from typing import Optional
from urllib.parse import quote

import structlog
from lxml import etree

from .types import XHTML_NAMESPACE, InvalidFormatError, RenderConfig, Stylesheet
from .validator import is_valid_rfc3339_date, iso_utc, to_utc


logger = structlog.get_logger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'

# Characters left untouched when percent-encoding a whole URI
URI_SAFE_CHARACTERS = ";,/?:@&=+$-_.!~*'()#"


class XMLFormatter:
    """
    Formats dates, hrefs and the final document text.

    Serialization is deterministic: the same tree always yields the same
    string, so rendering an unchanged feed twice gives identical output.
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        self.config = config or RenderConfig()
        self.logger = logger.bind(component="XMLFormatter")

    @staticmethod
    def format_date(value: datetime) -> str:
        """
        Render a date as an RFC 3339 UTC timestamp with milliseconds.

        Raises:
            InvalidFormatError: If the value is not a representable datetime
        """
        if not is_valid_rfc3339_date(value):
            raise InvalidFormatError("Invalid RFC 3339 date")
        return iso_utc(value)

    @staticmethod
    def utc_instant(value: datetime) -> datetime:
        """Validated UTC form of a date, used to order entries."""
        if not is_valid_rfc3339_date(value):
            raise InvalidFormatError("Invalid RFC 3339 date")
        return to_utc(value)

    @staticmethod
    def encode_href(href: str) -> str:
        """Percent-encode characters that are unsafe in a URI, e.g. spaces."""
        return quote(href, safe=URI_SAFE_CHARACTERS)

    def stylesheet_instruction(self, stylesheet: Stylesheet) -> etree._ProcessingInstruction:
        """Build the ``xml-stylesheet`` processing instruction."""
        stylesheet_type = stylesheet.effective_type.replace('"', "&quot;")
        href = self.encode_href(stylesheet.href)
        return etree.ProcessingInstruction(
            "xml-stylesheet", f'type="{stylesheet_type}" href="{href}"'
        )

    def serialize(self, root: etree._Element) -> str:
        """
        Serialize a feed tree, preamble included.

        Processing instructions attached before ``root`` are written between
        the XML declaration and the root element. Inserted XHTML subtrees
        are written exactly as supplied.
        """
        if self.config.pretty_print:
            self._indent(root, 0)
        separator = "\n" if self.config.pretty_print else ""

        preamble = [
            etree.tostring(sibling, encoding="unicode", with_tail=False)
            for sibling in reversed(list(root.itersiblings(preceding=True)))
        ]
        body = etree.tostring(root, encoding="unicode", with_tail=False)

        document = f"{XML_DECLARATION}\n{separator.join(preamble + [body])}\n"

        self.logger.debug("Serialized feed document", length=len(document))
        return document

    def _indent(self, element: etree._Element, level: int) -> None:
        # XHTML payloads keep their own whitespace
        if etree.QName(element).namespace == XHTML_NAMESPACE:
            return

        children = [child for child in element if isinstance(child.tag, str)]
        if not children:
            return

        space = " " * self.config.indent_size
        child_indent = "\n" + space * (level + 1)
        if not element.text or not element.text.strip():
            element.text = child_indent

        for child in children:
            self._indent(child, level + 1)
            if not child.tail or not child.tail.strip():
                child.tail = child_indent

        last = children[-1]
        if not last.tail.strip():
            last.tail = "\n" + space * level
