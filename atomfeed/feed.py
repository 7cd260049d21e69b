"""
RFC 4287 Atom feed: validated options, owned entries and rendering.
"""

import copy
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

import structlog

from .bcp47 import is_valid_language_tag
from .collection import EntryCollection
from .converter import AtomXMLConverter
from .types import (
    Entry,
    FeedError,
    FeedOptions,
    InvalidFormatError,
    Link,
    RenderConfig,
)
from .validator import validate_feed_options, validate_link


logger = structlog.get_logger(__name__)


class AtomFeed:
    """
    Atom feed generator.

    Options are validated once on construction and copied, so later changes
    to the caller's objects do not leak in. Rendering flags live in the
    :class:`RenderConfig` given here; nothing is read from global state.
    """

    def __init__(
        self,
        options: Union[FeedOptions, Mapping[str, Any]],
        config: Optional[RenderConfig] = None,
    ):
        """
        Create a feed.

        Args:
            options: Feed metadata, as a record or a plain mapping
            config: Rendering flags; defaults to unsorted, unprefixed output

        Raises:
            FeedError: On the first invalid option
        """
        self.logger = logger.bind(component="AtomFeed")

        try:
            if isinstance(options, Mapping):
                options = FeedOptions.from_dict(options)
            self._check_language_tags(options)
            validate_feed_options(options)
        except FeedError as e:
            self.logger.warning("Rejected feed options", error=str(e), field=e.field)
            raise

        self._options = copy.deepcopy(options)
        self.config = config or RenderConfig()
        self._entries = EntryCollection()
        self._converter = AtomXMLConverter(self.config)

        self.logger.info(
            "Atom feed created",
            feed_id=self._options.id,
            use_namespace_prefix=self.config.use_namespace_prefix,
            sort_entries=self.config.sort_entries,
        )

    @staticmethod
    def _check_language_tags(options: FeedOptions) -> None:
        if options.lang and not is_valid_language_tag(options.lang):
            raise InvalidFormatError("Invalid language tag in feed", field="lang")

        constructs = (
            ("title", options.title),
            ("subtitle", options.subtitle),
            ("rights", options.rights),
        )
        for name, construct in constructs:
            lang = getattr(construct, "lang", None)
            if lang and not is_valid_language_tag(lang):
                raise InvalidFormatError(f"Invalid language tag in {name}", field=name)

    @property
    def options(self) -> FeedOptions:
        """Copy of the feed options."""
        return copy.deepcopy(self._options)

    def add_entry(self, entry: Union[Entry, Mapping[str, Any]]) -> None:
        """Validate and add an entry. Duplicate ids are allowed."""
        if isinstance(entry, Mapping):
            try:
                entry = Entry.from_dict(entry)
            except FeedError as e:
                self.logger.warning("Rejected entry", error=str(e), field=e.field)
                raise
        self._entries.add(entry)

    def remove_entry(self, entry_id: str) -> bool:
        """Remove all entries with ``entry_id``; True if any were removed."""
        return self._entries.remove(entry_id)

    def get_entries(self) -> Tuple[Entry, ...]:
        return self._entries.list()

    def clear(self) -> None:
        """Remove all entries from the feed."""
        self._entries.clear()

    def get_links(self) -> Tuple[Link, ...]:
        return tuple(copy.deepcopy(self._options.links or []))

    def set_links(self, links: Iterable[Link]) -> None:
        """
        Replace the feed links.

        Every link is validated before anything is replaced, so a bad link
        leaves the current set untouched.
        """
        updated_links = []
        for link in links:
            try:
                validate_link(link)
            except FeedError as e:
                self.logger.warning("Rejected feed links", error=str(e), field=e.field)
                raise
            updated_links.append(copy.deepcopy(link))

        self._options.links = updated_links
        self.logger.debug("Replaced feed links", count=len(updated_links))

    def to_xml(self) -> str:
        """Render the feed as an Atom document."""
        return self._converter.render(self._options, tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
