"""
Field validation for Atom feed constructs (RFC 4287).

Every ``validate_*`` function either returns silently or raises the first
problem it finds as a :class:`~atomfeed.types.FeedError` subclass. Container
validators check their own required fields before descending into nested
constructs.
"""

import base64
import binascii
import re
from datetime import datetime, timezone
from typing import Iterable, Optional
from urllib.parse import urlsplit

import structlog

from .bcp47 import is_valid_language_tag
from .types import (
    BASE64,
    Category,
    Content,
    Entry,
    FeedOptions,
    Generator,
    InvalidFormatError,
    InvalidTypeError,
    Link,
    MissingRequiredFieldError,
    Person,
    StructuralConstraintError,
    TextConstruct,
    TextType,
    UnsupportedValueError,
    type_name,
)


logger = structlog.get_logger(__name__)

# Fallback for IRIs the URL parser rejects: any scheme followed by non-space text
_IRI_FALLBACK = re.compile(r"[a-zA-Z][a-z0-9+.-]*:[^\s]*", re.IGNORECASE)
_URL_SCHEME = re.compile(r"[a-zA-Z][a-zA-Z0-9+.-]*")
# Schemes whose URLs are unusable without a host
_HOST_SCHEMES = {"http", "https", "ftp", "ws", "wss", "file"}

_EMAIL = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")

_RFC3339_UTC = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{3})?Z")

# Structural heuristic only; no XML well-formedness check happens here
_XHTML_DIV = re.compile(
    r'<div xmlns="http://www\.w3\.org/1999/xhtml".*>.*</div>', re.DOTALL
)

TEXT_TYPES = frozenset(text_type.value for text_type in TextType)

# Characters XML 1.0 cannot carry, escaped or not
_XML_UNSAFE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _parses_as_url(iri: str) -> bool:
    try:
        parts = urlsplit(iri)
    except ValueError:
        return False

    if not parts.scheme or not _URL_SCHEME.fullmatch(parts.scheme):
        return False

    if parts.scheme.lower() in _HOST_SCHEMES:
        netloc = parts.netloc
        if parts.scheme.lower() == "file":
            return iri.lower().startswith("file:")
        return bool(netloc) and not any(ch.isspace() for ch in netloc)

    return True


def is_valid_iri(iri) -> bool:
    """
    Check an IRI (RFC 3987, simplified).

    The value is first parsed as an absolute URL; when that fails a
    permissive ``scheme:rest`` pattern is tried. The fallback deliberately
    accepts some authority-less URIs.
    """
    if not isinstance(iri, str) or not iri:
        return False
    if _parses_as_url(iri):
        return True
    return _IRI_FALLBACK.fullmatch(iri) is not None


def is_valid_email(email) -> bool:
    """Single ``@``, no whitespace, dotted domain. Not full RFC 5322."""
    if not isinstance(email, str):
        return False
    return _EMAIL.fullmatch(email) is not None


def is_valid_base64(value) -> bool:
    """Check that ``value`` is canonical base64 (RFC 4648)."""
    if not isinstance(value, str):
        return False
    try:
        decoded = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return base64.b64encode(decoded).decode("ascii") == value


def to_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso_utc(value: datetime) -> str:
    """Render ``value`` as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    utc = to_utc(value)
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}"
        f"T{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}"
        f".{utc.microsecond // 1000:03d}Z"
    )


def is_valid_rfc3339_date(value) -> bool:
    """
    Check that ``value`` is a datetime whose UTC rendering is RFC 3339.

    Args:
        value: Candidate date

    Returns:
        False for non-datetimes and for instants outside the representable
        UTC range
    """
    if not isinstance(value, datetime):
        return False
    try:
        rendered = iso_utc(value)
    except (OverflowError, ValueError):
        return False
    return _RFC3339_UTC.fullmatch(rendered) is not None


def is_valid_xhtml_content(content) -> bool:
    """Check that content is wrapped in a single XHTML-namespaced div."""
    if not isinstance(content, str):
        return False
    return _XHTML_DIV.fullmatch(content.strip()) is not None


def is_xml_safe(value) -> bool:
    """Check that a string only holds characters allowed in XML 1.0."""
    if not isinstance(value, str):
        return False
    return _XML_UNSAFE.search(value) is None


def _check_xml_safe(field: str, label: str, *values) -> None:
    for value in values:
        if isinstance(value, str) and not is_xml_safe(value):
            raise InvalidFormatError(
                f"{label} contains characters not allowed in XML", field=field
            )


def validate_text_construct(text: TextConstruct, field: str) -> None:
    """
    Validate a text construct (section 3.1).

    Args:
        text: Construct to validate
        field: Human-readable field name used in error messages

    Raises:
        FeedError: On the first failed rule
    """
    if not text.content:
        raise MissingRequiredFieldError(f"{field} content is required", field=field)
    _check_xml_safe(field, field, text.content, text.base)

    kind = type_name(text.type)
    if kind is not None and kind not in TEXT_TYPES:
        raise UnsupportedValueError(
            f"Invalid {field} type: must be 'text', 'html', or 'xhtml'", field=field
        )

    if text.lang and not is_valid_language_tag(text.lang):
        raise InvalidFormatError(f"Invalid language tag in {field}", field=field)

    if kind == TextType.XHTML.value and not is_valid_xhtml_content(text.content):
        raise StructuralConstraintError(
            f'{field} with type="xhtml" must contain a single div element', field=field
        )

    if text.base and not is_valid_iri(text.base):
        raise InvalidFormatError(f"Invalid base IRI in {field}", field=field)


def validate_person(person: Person) -> None:
    """Validate a person construct (section 3.2)."""
    if not person.name:
        raise MissingRequiredFieldError("Person name is required", field="name")
    _check_xml_safe("name", "Person", person.name, person.email, person.uri)
    if person.uri and not is_valid_iri(person.uri):
        raise InvalidFormatError(f"Invalid person URI: {person.uri}", field="uri")
    if person.email and not is_valid_email(person.email):
        raise InvalidFormatError(f"Invalid person email: {person.email}", field="email")


def validate_category(category: Category) -> None:
    """Validate a category (section 4.2.2)."""
    if not category.term:
        raise MissingRequiredFieldError("Category term is required", field="term")
    _check_xml_safe("term", "Category", category.term, category.scheme, category.label)
    if category.scheme and not is_valid_iri(category.scheme):
        raise InvalidFormatError(
            f"Invalid category scheme: {category.scheme}", field="scheme"
        )


def validate_link(link: Link) -> None:
    """Validate a link (section 4.2.7)."""
    if not link.href:
        raise MissingRequiredFieldError("Link href is required", field="href")
    _check_xml_safe(
        "href", "Link", link.href, link.rel, link.type, link.hreflang, link.title, link.length
    )
    if not is_valid_iri(link.href):
        raise InvalidFormatError(f"Invalid link href: {link.href}", field="href")
    if link.hreflang and not is_valid_language_tag(link.hreflang):
        raise InvalidFormatError(
            f"Invalid link hreflang: {link.hreflang}", field="hreflang"
        )


def validate_content(content: Content) -> None:
    """
    Validate entry content (section 4.1.3).

    Exactly one of ``content`` and ``src`` must be given. The xhtml and
    base64 payload checks only apply to inline content.
    """
    if not content.content and not content.src:
        raise StructuralConstraintError(
            "Content must have either content or src", field="content"
        )
    if content.content and content.src:
        raise StructuralConstraintError(
            "Content cannot have both content and src", field="content"
        )
    _check_xml_safe(
        "content", "Content", content.content, type_name(content.type), content.src, content.base
    )
    if content.src and not is_valid_iri(content.src):
        raise InvalidFormatError(f"Invalid content src: {content.src}", field="src")

    kind = type_name(content.type)
    if content.content:
        if kind == TextType.XHTML.value and not is_valid_xhtml_content(content.content):
            raise StructuralConstraintError(
                "XHTML content must contain a single div element", field="content"
            )
        if kind == BASE64 and not is_valid_base64(content.content):
            raise InvalidFormatError("Invalid base64 content", field="content")

    if content.lang and not is_valid_language_tag(content.lang):
        raise InvalidFormatError("Invalid content language tag", field="lang")
    if content.base and not is_valid_iri(content.base):
        raise InvalidFormatError("Invalid content base IRI", field="base")


def validate_generator(generator: Generator) -> None:
    """Validate the feed generator (section 4.2.4)."""
    if not generator.name:
        raise MissingRequiredFieldError("Generator name is required", field="generator")
    _check_xml_safe("generator", "Generator", generator.name, generator.version, generator.uri)
    if generator.uri and not is_valid_iri(generator.uri):
        raise InvalidFormatError(
            f"Invalid generator URI: {generator.uri}", field="generator"
        )


def _validate_date(value, field: str, label: str) -> None:
    if not isinstance(value, datetime):
        raise InvalidTypeError(f"{label} must be a datetime object", field=field)
    if not is_valid_rfc3339_date(value):
        raise InvalidFormatError(f"{label} must be a valid RFC 3339 date", field=field)


def _validate_each(validate, items: Optional[Iterable]) -> None:
    for item in items or ():
        validate(item)


def validate_feed_options(options: FeedOptions) -> None:
    """
    Validate feed options (section 4.1.1).

    Raises:
        FeedError: On the first failed rule; nothing is collected
    """
    if not options.id:
        raise MissingRequiredFieldError("Feed id is required", field="id")
    if not options.title:
        raise MissingRequiredFieldError("Feed title is required", field="title")
    if options.updated is None:
        raise MissingRequiredFieldError("Feed updated date is required", field="updated")
    if not isinstance(options.updated, datetime):
        raise InvalidTypeError("Feed updated must be a datetime object", field="updated")
    if not is_valid_rfc3339_date(options.updated):
        raise InvalidFormatError("Invalid RFC 3339 date", field="updated")
    _check_xml_safe("id", "Feed", options.id, options.icon, options.logo, options.base)

    if options.lang and not is_valid_language_tag(options.lang):
        raise InvalidFormatError("Invalid language tag", field="lang")

    validate_text_construct(options.title, "Feed title")
    if options.subtitle:
        validate_text_construct(options.subtitle, "Feed subtitle")
    if options.rights:
        validate_text_construct(options.rights, "Feed rights")

    if options.icon and not is_valid_iri(options.icon):
        raise InvalidFormatError("Invalid icon IRI", field="icon")
    if options.logo and not is_valid_iri(options.logo):
        raise InvalidFormatError("Invalid logo IRI", field="logo")
    if options.base and not is_valid_iri(options.base):
        raise InvalidFormatError("Invalid xml:base IRI", field="base")

    if options.generator:
        validate_generator(options.generator)

    _validate_each(validate_person, options.authors)
    _validate_each(validate_person, options.contributors)
    _validate_each(validate_category, options.categories)
    _validate_each(validate_link, options.links)


def validate_entry(entry: Entry) -> None:
    """
    Validate a feed entry (section 4.1.2).

    Raises:
        FeedError: On the first failed rule; nothing is collected
    """
    if not entry.id:
        raise MissingRequiredFieldError("Entry id is required", field="id")
    if not entry.title:
        raise MissingRequiredFieldError("Entry title is required", field="title")
    if entry.updated is None:
        raise MissingRequiredFieldError("Entry updated date is required", field="updated")
    _validate_date(entry.updated, "updated", "Entry updated")
    _check_xml_safe("id", "Entry", entry.id, entry.source)

    validate_text_construct(entry.title, "Entry title")

    if entry.content:
        validate_content(entry.content)
    if entry.summary:
        validate_text_construct(entry.summary, "Entry summary")
    if entry.rights:
        validate_text_construct(entry.rights, "Entry rights")

    _validate_each(validate_person, entry.authors)
    _validate_each(validate_person, entry.contributors)
    _validate_each(validate_category, entry.categories)
    _validate_each(validate_link, entry.links)

    if entry.published is not None:
        _validate_date(entry.published, "published", "Entry published")
