"""
Atom document builder: feed options and entries to an lxml element tree.
"""

from typing import Iterable, List, Optional, Sequence

import structlog
from lxml import etree

from .formatter import XMLFormatter
from .types import (
    ATOM_NAMESPACE,
    XML_NAMESPACE,
    Category,
    Content,
    Entry,
    FeedError,
    FeedOptions,
    Generator,
    Link,
    Person,
    RenderConfig,
    RenderError,
    Stylesheet,
    TextConstruct,
    TextType,
    type_name,
)


logger = structlog.get_logger(__name__)

ATOM_PREFIX = "atom"

# XHTML payloads are trusted markup, but never allowed to reach out
_XHTML_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


class AtomXMLConverter:
    """
    Builds Atom (RFC 4287) documents.

    Child elements are emitted in a fixed order and absent optional fields
    produce no element at all. Building never mutates its inputs.
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        self.config = config or RenderConfig()
        self.logger = logger.bind(component="AtomXMLConverter")
        self.formatter = XMLFormatter(self.config)

        if self.config.use_namespace_prefix:
            self.namespace_map = {ATOM_PREFIX: ATOM_NAMESPACE}
        else:
            self.namespace_map = {None: ATOM_NAMESPACE}

    def render(self, options: FeedOptions, entries: Sequence[Entry]) -> str:
        """
        Render a complete Atom document.

        Args:
            options: Validated feed options
            entries: Validated entries in storage order

        Returns:
            The document as a string, XML declaration included

        Raises:
            FeedError: If a date cannot be formatted or XHTML content cannot
                be inserted as markup
        """
        try:
            root = self._create_feed_element(options, self._ordered(entries))
            if self.config.stylesheet is not None:
                root.addprevious(self.formatter.stylesheet_instruction(self.config.stylesheet))
        except FeedError:
            raise
        except ValueError as e:
            # lxml refuses strings XML cannot represent
            raise RenderError(f"Cannot render feed: {e}") from e

        xml_content = self.formatter.serialize(root)

        self.logger.info(
            "Rendered Atom feed",
            feed_id=options.id,
            entries=len(entries),
            sorted=self.config.sort_entries,
        )
        return xml_content

    def _ordered(self, entries: Sequence[Entry]) -> List[Entry]:
        if not self.config.sort_entries:
            return list(entries)
        # sorted() is stable with reverse=True, so ties keep insertion order
        return sorted(
            entries,
            key=lambda entry: self.formatter.utc_instant(entry.updated),
            reverse=True,
        )

    def _tag(self, name: str) -> str:
        return f"{{{ATOM_NAMESPACE}}}{name}"

    def _element(self, parent: etree._Element, name: str, text: Optional[str] = None) -> etree._Element:
        element = etree.SubElement(parent, self._tag(name))
        if text is not None:
            element.text = text
        return element

    def _create_feed_element(self, options: FeedOptions, entries: Iterable[Entry]) -> etree._Element:
        root = etree.Element(self._tag("feed"), nsmap=self.namespace_map)
        _set_xml_attributes(root, options.lang, options.base)

        self._element(root, "id", options.id)
        self._add_text_construct(root, "title", options.title)
        self._element(root, "updated", self.formatter.format_date(options.updated))

        for author in options.authors or ():
            self._add_person(root, "author", author)
        for contributor in options.contributors or ():
            self._add_person(root, "contributor", contributor)
        for category in options.categories or ():
            self._add_category(root, category)

        if options.generator:
            self._add_generator(root, options.generator)
        if options.icon:
            self._element(root, "icon", options.icon)

        for link in options.links or ():
            self._add_link(root, link)

        if options.logo:
            self._element(root, "logo", options.logo)
        if options.rights:
            self._add_text_construct(root, "rights", options.rights)
        if options.subtitle:
            self._add_text_construct(root, "subtitle", options.subtitle)

        for entry in entries:
            self._add_entry(root, entry)

        return root

    def _add_entry(self, parent: etree._Element, entry: Entry) -> None:
        element = self._element(parent, "entry")

        self._element(element, "id", entry.id)
        self._add_text_construct(element, "title", entry.title)
        self._element(element, "updated", self.formatter.format_date(entry.updated))

        for author in entry.authors or ():
            self._add_person(element, "author", author)
        for contributor in entry.contributors or ():
            self._add_person(element, "contributor", contributor)
        for category in entry.categories or ():
            self._add_category(element, category)

        if entry.content:
            self._add_content(element, entry.content)

        for link in entry.links or ():
            self._add_link(element, link)

        if entry.published is not None:
            self._element(element, "published", self.formatter.format_date(entry.published))
        if entry.rights:
            self._add_text_construct(element, "rights", entry.rights)
        if entry.source:
            self._element(element, "source", entry.source)
        if entry.summary:
            self._add_text_construct(element, "summary", entry.summary)

    def _add_text_construct(self, parent: etree._Element, name: str, text: TextConstruct) -> None:
        element = self._element(parent, name)

        kind = type_name(text.type)
        if kind:
            element.set("type", kind)
        _set_xml_attributes(element, text.lang, text.base)

        if kind == TextType.XHTML.value:
            element.append(_parse_xhtml(text.content, name))
        else:
            element.text = text.content

    def _add_content(self, parent: etree._Element, content: Content) -> None:
        element = self._element(parent, "content")

        kind = type_name(content.type)
        if kind:
            element.set("type", kind)
        _set_xml_attributes(element, content.lang, content.base)
        if content.src:
            element.set("src", content.src)
            # Out-of-line content is empty
            return

        if kind == TextType.XHTML.value:
            element.append(_parse_xhtml(content.content, "content"))
        else:
            element.text = content.content

    def _add_person(self, parent: etree._Element, name: str, person: Person) -> None:
        element = self._element(parent, name)
        self._element(element, "name", person.name)
        if person.email:
            self._element(element, "email", person.email)
        if person.uri:
            self._element(element, "uri", person.uri)

    def _add_category(self, parent: etree._Element, category: Category) -> None:
        element = self._element(parent, "category")
        element.set("term", category.term)
        if category.scheme:
            element.set("scheme", category.scheme)
        if category.label:
            element.set("label", category.label)

    def _add_generator(self, parent: etree._Element, generator: Generator) -> None:
        element = self._element(parent, "generator", generator.name)
        if generator.version:
            element.set("version", generator.version)
        if generator.uri:
            element.set("uri", generator.uri)

    def _add_link(self, parent: etree._Element, link: Link) -> None:
        element = self._element(parent, "link")
        element.set("href", self.formatter.encode_href(link.href))
        for attribute in ("rel", "type", "hreflang", "title", "length"):
            value = getattr(link, attribute)
            if value:
                element.set(attribute, str(value))


def _set_xml_attributes(element: etree._Element, lang: Optional[str], base: Optional[str]) -> None:
    if lang:
        element.set(f"{{{XML_NAMESPACE}}}lang", lang)
    if base:
        element.set(f"{{{XML_NAMESPACE}}}base", base)


def _parse_xhtml(content: str, field: str) -> etree._Element:
    """Parse an XHTML div so it can be inserted as a child element."""
    try:
        return etree.fromstring(content.strip(), _XHTML_PARSER)
    except etree.XMLSyntaxError as e:
        raise RenderError(f"{field} XHTML is not well-formed: {e}", field=field) from e


def render_feed(
    options: FeedOptions,
    entries: Sequence[Entry],
    use_namespace_prefix: bool = False,
    sort_entries: bool = False,
    stylesheet: Optional[Stylesheet] = None,
) -> str:
    """Render ``options`` and ``entries`` with one-off rendering flags."""
    config = RenderConfig(
        use_namespace_prefix=use_namespace_prefix,
        sort_entries=sort_entries,
        stylesheet=stylesheet,
    )
    return AtomXMLConverter(config).render(options, entries)
