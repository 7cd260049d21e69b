import pytest
from datetime import datetime, timezone
from typing import Callable

from lxml import etree

from atomfeed import Entry, FeedOptions, TextConstruct


FEED_ID = "urn:uuid:60a76c80-d399-11d9-b93C-0003939e0af6"
ENTRY_ID = "urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a"


@pytest.fixture
def updated() -> datetime:
    """Fixed feed timestamp so rendered documents are deterministic."""
    return datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def feed_options(updated) -> FeedOptions:
    """Minimal valid feed options."""
    return FeedOptions(
        id=FEED_ID,
        title=TextConstruct(content="Test Feed"),
        updated=updated,
    )


@pytest.fixture
def make_entry(updated) -> Callable[..., Entry]:
    """Factory for minimal valid entries; keyword arguments override fields."""
    def _make_entry(**overrides) -> Entry:
        fields = {
            "id": ENTRY_ID,
            "title": TextConstruct(content="Test Entry"),
            "updated": updated,
        }
        fields.update(overrides)
        return Entry(**fields)

    return _make_entry


@pytest.fixture
def parse_xml() -> Callable[[str], etree._Element]:
    """Re-parse a rendered document and return its root element."""
    def _parse(xml_content: str) -> etree._Element:
        return etree.fromstring(xml_content.encode("utf-8"))

    return _parse
