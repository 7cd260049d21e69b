"""
Type definitions for Atom feed generation (RFC 4287).
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, List, Mapping, Optional, Union


ATOM_NAMESPACE = "http://www.w3.org/2005/Atom"
XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


class FeedError(Exception):
    """Base exception for feed validation and rendering errors."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class MissingRequiredFieldError(FeedError):
    """A required field (id, title, updated, name, term, href) is absent."""
    pass


class InvalidTypeError(FeedError, TypeError):
    """A field holds a value of the wrong kind, e.g. a non-datetime date."""
    pass


class InvalidFormatError(FeedError, ValueError):
    """Malformed IRI, email, language tag, base64 payload or date."""
    pass


class StructuralConstraintError(FeedError, ValueError):
    """XHTML wrapper missing, or content/src exclusivity broken."""
    pass


class UnsupportedValueError(FeedError, ValueError):
    """Text construct type outside text/html/xhtml."""
    pass


class RenderError(FeedError):
    """Serialization failure not covered by the validation errors."""
    pass


class TextType(str, Enum):
    """Text construct types (RFC 4287 section 3.1)."""
    TEXT = "text"
    HTML = "html"
    XHTML = "xhtml"


BASE64 = "base64"

# Content accepts the text types, "base64" or any MIME media type
ContentType = Union[TextType, str]


def type_name(value: Optional[ContentType]) -> Optional[str]:
    """Plain string form of a text/content type tag."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass
class TextConstruct:
    """Human-readable text with an optional format type (section 3.1)."""

    content: str
    type: Optional[TextType] = None
    lang: Optional[str] = None
    base: Optional[str] = None


@dataclass
class Person:
    """Person construct (section 3.2)."""

    name: str
    email: Optional[str] = None
    uri: Optional[str] = None


@dataclass
class Category:
    """Category (section 4.2.2)."""

    term: str
    scheme: Optional[str] = None
    label: Optional[str] = None


@dataclass
class Link:
    """Link (section 4.2.7)."""

    href: str
    rel: Optional[str] = None
    type: Optional[str] = None
    hreflang: Optional[str] = None
    title: Optional[str] = None
    length: Optional[str] = None


@dataclass
class Content:
    """
    Entry content (section 4.1.3).

    Exactly one of ``content`` and ``src`` must be set.
    """

    content: Optional[str] = None
    type: Optional[ContentType] = None
    src: Optional[str] = None
    lang: Optional[str] = None
    base: Optional[str] = None


@dataclass
class Generator:
    """Feed generator (section 4.2.4)."""

    name: str
    version: Optional[str] = None
    uri: Optional[str] = None


@dataclass
class Stylesheet:
    """xml-stylesheet processing instruction target."""

    href: str
    type: Optional[str] = None

    DEFAULT_TYPE = "text/xsl"

    @property
    def effective_type(self) -> str:
        return self.type or self.DEFAULT_TYPE


@dataclass
class Entry:
    """Feed entry (section 4.1.2)."""

    id: str
    title: TextConstruct
    updated: datetime
    authors: Optional[List[Person]] = None
    contributors: Optional[List[Person]] = None
    categories: Optional[List[Category]] = None
    content: Optional[Content] = None
    links: Optional[List[Link]] = None
    published: Optional[datetime] = None
    rights: Optional[TextConstruct] = None
    source: Optional[str] = None
    summary: Optional[TextConstruct] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Entry":
        """Build an entry from a plain mapping, nested constructs included."""
        return cls(
            id=data.get("id", ""),
            title=_text_construct(data.get("title"), "title"),
            updated=_parse_date(data.get("updated")),
            authors=_list_of(Person, data.get("authors"), "authors"),
            contributors=_list_of(Person, data.get("contributors"), "contributors"),
            categories=_list_of(Category, data.get("categories"), "categories"),
            content=_record(Content, data.get("content"), "content"),
            links=_list_of(Link, data.get("links"), "links"),
            published=_parse_date(data.get("published")),
            rights=_text_construct(data.get("rights"), "rights"),
            source=data.get("source"),
            summary=_text_construct(data.get("summary"), "summary"),
        )


@dataclass
class FeedOptions:
    """Feed-level metadata (section 4.1.1)."""

    id: str
    title: TextConstruct
    updated: datetime
    authors: Optional[List[Person]] = None
    contributors: Optional[List[Person]] = None
    categories: Optional[List[Category]] = None
    generator: Optional[Generator] = None
    icon: Optional[str] = None
    links: Optional[List[Link]] = None
    logo: Optional[str] = None
    rights: Optional[TextConstruct] = None
    subtitle: Optional[TextConstruct] = None
    lang: Optional[str] = None
    base: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FeedOptions":
        """Build feed options from a plain mapping, nested constructs included."""
        return cls(
            id=data.get("id", ""),
            title=_text_construct(data.get("title"), "title"),
            updated=_parse_date(data.get("updated")),
            authors=_list_of(Person, data.get("authors"), "authors"),
            contributors=_list_of(Person, data.get("contributors"), "contributors"),
            categories=_list_of(Category, data.get("categories"), "categories"),
            generator=_record(Generator, data.get("generator"), "generator"),
            icon=data.get("icon"),
            links=_list_of(Link, data.get("links"), "links"),
            logo=data.get("logo"),
            rights=_text_construct(data.get("rights"), "rights"),
            subtitle=_text_construct(data.get("subtitle"), "subtitle"),
            lang=data.get("lang"),
            base=data.get("base"),
        )


@dataclass
class RenderConfig:
    """Configuration for Atom document rendering."""

    use_namespace_prefix: bool = False
    sort_entries: bool = False
    stylesheet: Optional[Stylesheet] = None

    # Output formatting
    pretty_print: bool = True
    indent_size: int = 2

    @classmethod
    def for_blog(cls, stylesheet: Optional[Stylesheet] = None) -> "RenderConfig":
        """Configuration used by the blog adapter: newest entries first."""
        return cls(sort_entries=True, stylesheet=stylesheet)


def _record(record_cls, value, field: str):
    if value is None or isinstance(value, record_cls):
        return value
    if not isinstance(value, Mapping):
        raise InvalidTypeError(
            f"{field} must be a mapping or {record_cls.__name__}", field=field
        )
    try:
        return record_cls(**value)
    except TypeError as e:
        raise InvalidTypeError(f"Invalid {field}: {e}", field=field) from e


def _list_of(record_cls, values, field: str):
    if values is None:
        return None
    if isinstance(values, (str, Mapping)):
        raise InvalidTypeError(f"{field} must be a list", field=field)
    return [_record(record_cls, value, field) for value in values]


def _text_construct(value, field: str):
    # A bare string is shorthand for a plain text construct
    if isinstance(value, str):
        return TextConstruct(content=value)
    return _record(TextConstruct, value, field)


def _parse_date(value):
    if not isinstance(value, str):
        return value
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        # Left as-is so validation reports the bad value
        return value
