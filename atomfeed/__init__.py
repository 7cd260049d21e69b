"""
Atom feed generation (RFC 4287) with BCP 47 language tag validation.

This package provides:
- A subtag-by-subtag BCP 47 language tag recognizer
- Fail-fast validators for every Atom construct
- lxml-based document building with optional ``atom:`` prefixing
  and an xml-stylesheet processing instruction
- An entry collection with snapshot reads and date-sorted output
- A blog-oriented convenience wrapper
"""

from .bcp47 import is_valid_language_tag
from .blog import Author, BlogFeed, BlogFeedOptions, BlogPost, PaginationLinks
from .collection import EntryCollection
from .converter import AtomXMLConverter, render_feed
from .feed import AtomFeed
from .formatter import XMLFormatter
from .types import (
    Category,
    Content,
    Entry,
    FeedError,
    FeedOptions,
    Generator,
    InvalidFormatError,
    InvalidTypeError,
    Link,
    MissingRequiredFieldError,
    Person,
    RenderConfig,
    RenderError,
    StructuralConstraintError,
    Stylesheet,
    TextConstruct,
    TextType,
    UnsupportedValueError,
)
from .validator import validate_entry, validate_feed_options

__all__ = [
    # Core classes
    "AtomFeed",
    "AtomXMLConverter",
    "EntryCollection",
    "XMLFormatter",
    "BlogFeed",
    # Functions
    "is_valid_language_tag",
    "render_feed",
    "validate_entry",
    "validate_feed_options",
    # Data model
    "Category",
    "Content",
    "Entry",
    "FeedOptions",
    "Generator",
    "Link",
    "Person",
    "Stylesheet",
    "TextConstruct",
    "TextType",
    "Author",
    "BlogFeedOptions",
    "BlogPost",
    "PaginationLinks",
    # Configuration
    "RenderConfig",
    # Exceptions
    "FeedError",
    "MissingRequiredFieldError",
    "InvalidTypeError",
    "InvalidFormatError",
    "StructuralConstraintError",
    "UnsupportedValueError",
    "RenderError",
]
