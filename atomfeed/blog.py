"""
Blog-oriented wrapper around :class:`~atomfeed.feed.AtomFeed`.

Converts "blog post" vocabulary (authors with websites, plain-string titles,
link hrefs, pagination) into Atom constructs. Validation and rendering are
left to the underlying feed.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple, Union

import structlog

from .feed import AtomFeed
from .types import (
    Category,
    Content,
    Entry,
    FeedOptions,
    Link,
    Person,
    RenderConfig,
    Stylesheet,
    TextConstruct,
    TextType,
)


logger = structlog.get_logger(__name__)

# Link relations owned by the pagination helpers
PAGINATION_RELS = ("first", "last", "next", "previous", "self")


@dataclass
class Author:
    name: str
    email: Optional[str] = None
    website: Optional[str] = None


@dataclass
class PaginationLinks:
    """Paged-feed navigation (RFC 5005 relations); ``current`` maps to ``self``."""

    first: Optional[str] = None
    last: Optional[str] = None
    next: Optional[str] = None
    previous: Optional[str] = None
    current: Optional[str] = None

    def as_links(self) -> List[Link]:
        hrefs = (self.first, self.last, self.next, self.previous, self.current)
        return [
            Link(href=href, rel=rel)
            for rel, href in zip(PAGINATION_RELS, hrefs)
            if href
        ]


@dataclass
class BlogFeedOptions:
    id: str
    title: str
    subtitle: Optional[str] = None
    description: Optional[str] = None  # Alternative to subtitle
    author: Optional[Author] = None
    authors: Optional[Union[Author, Sequence[Author]]] = None
    contributors: Optional[Union[Author, Sequence[Author]]] = None
    links: Optional[Union[str, Sequence[str]]] = None
    pagination: Optional[PaginationLinks] = None
    language: Optional[str] = None
    updated: Optional[datetime] = None
    icon: Optional[str] = None
    logo: Optional[str] = None
    rights: Optional[str] = None
    stylesheet: Optional[str] = None


@dataclass
class BlogPost:
    id: str
    title: str
    content: str
    content_type: TextType = TextType.TEXT
    summary: Optional[str] = None
    author: Optional[Author] = None
    authors: Optional[Union[Author, Sequence[Author]]] = None
    contributors: Optional[Union[Author, Sequence[Author]]] = None
    published: Optional[datetime] = None
    updated: Optional[datetime] = None
    links: Optional[Union[str, Sequence[str]]] = None
    categories: Optional[Union[str, Sequence[str]]] = None
    rights: Optional[str] = None


def _as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, (str, Author)):
        return [value]
    return list(value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def convert_person(author: Author) -> Person:
    return Person(name=author.name, email=author.email, uri=author.website)


def convert_people(
    author: Optional[Author] = None,
    authors: Optional[Union[Author, Sequence[Author]]] = None,
) -> Optional[List[Person]]:
    """Flatten a single author and one-or-many authors into persons."""
    people = ([author] if author else []) + _as_list(authors)
    if not people:
        return None
    return [convert_person(person) for person in people]


def convert_text(text: str) -> TextConstruct:
    """Plain strings are html when they contain markup, text otherwise."""
    return TextConstruct(
        content=text,
        type=TextType.HTML if "<" in text else TextType.TEXT,
    )


def convert_links(
    hrefs: Optional[Union[str, Sequence[str]]] = None,
    pagination: Optional[PaginationLinks] = None,
) -> List[Link]:
    links = [Link(href=href, rel="alternate") for href in _as_list(hrefs)]
    if pagination:
        links.extend(pagination.as_links())
    return links


def convert_categories(terms: Optional[Union[str, Sequence[str]]]) -> Optional[List[Category]]:
    if not terms:
        return None
    return [Category(term=term) for term in _as_list(terms)]


def convert_feed_options(options: BlogFeedOptions) -> FeedOptions:
    subtitle = options.subtitle or options.description
    return FeedOptions(
        id=options.id,
        title=convert_text(options.title),
        subtitle=convert_text(subtitle) if subtitle else None,
        authors=convert_people(options.author, options.authors),
        contributors=convert_people(authors=options.contributors),
        links=convert_links(options.links, options.pagination),
        lang=options.language,
        updated=options.updated or _utcnow(),
        icon=options.icon,
        logo=options.logo,
        rights=convert_text(options.rights) if options.rights else None,
    )


def convert_post(post: BlogPost) -> Entry:
    return Entry(
        id=post.id,
        title=convert_text(post.title),
        updated=post.updated or post.published or _utcnow(),
        content=Content(content=post.content, type=post.content_type),
        summary=convert_text(post.summary) if post.summary else None,
        authors=convert_people(post.author, post.authors),
        contributors=convert_people(authors=post.contributors),
        published=post.published,
        links=convert_links(post.links),
        categories=convert_categories(post.categories),
        rights=convert_text(post.rights) if post.rights else None,
    )


class BlogFeed:
    """
    Blog feed with newest posts first.

    The underlying :class:`AtomFeed` is created with entry sorting enabled
    and without the ``atom:`` prefix.
    """

    def __init__(self, options: BlogFeedOptions):
        stylesheet = Stylesheet(href=options.stylesheet) if options.stylesheet else None
        self.feed = AtomFeed(
            convert_feed_options(options),
            RenderConfig.for_blog(stylesheet=stylesheet),
        )
        self.logger = logger.bind(component="BlogFeed", feed_id=options.id)

    def add_post(self, post: BlogPost) -> None:
        self.feed.add_entry(convert_post(post))

    def remove_post(self, post_id: str) -> bool:
        return self.feed.remove_entry(post_id)

    def get_posts(self) -> Tuple[Entry, ...]:
        return self.feed.get_entries()

    def clear(self) -> None:
        self.feed.clear()

    def generate(self) -> str:
        """Render the blog feed as an Atom document."""
        return self.feed.to_xml()

    def set_pagination(self, pagination: PaginationLinks) -> None:
        """
        Replace the pagination links.

        Links with other relations are kept. The replacement is validated as
        a whole, so an invalid href leaves the existing links in place.
        """
        kept = [link for link in self.feed.get_links() if link.rel not in PAGINATION_RELS]
        self.feed.set_links(kept + pagination.as_links())
        self.logger.debug("Updated pagination", pagination=pagination)

    def get_pagination(self) -> PaginationLinks:
        pagination = PaginationLinks()
        fields = dict(zip(PAGINATION_RELS, ("first", "last", "next", "previous", "current")))
        for link in self.feed.get_links():
            if link.rel in fields:
                setattr(pagination, fields[link.rel], link.href)
        return pagination
