"""
Tests for the blog feed wrapper.
"""

import pytest
from datetime import datetime, timezone

from atomfeed.blog import Author, BlogFeed, BlogFeedOptions, BlogPost, PaginationLinks
from atomfeed.types import InvalidFormatError, TextType

ATOM = "{http://www.w3.org/2005/Atom}"


def _ids(root):
    return [entry.findtext(f"{ATOM}id") for entry in root.findall(f"{ATOM}entry")]


def _links(root):
    return [(link.get("rel"), link.get("href")) for link in root.findall(f"{ATOM}link")]


class TestBlogFeedOptions:
    """Test conversion of blog options into feed options."""

    def setup_method(self):
        """Set up test fixtures."""
        self.feed = BlogFeed(BlogFeedOptions(id="https://myblog.com", title="Test Blog"))

    def test_minimal_options(self, parse_xml):
        root = parse_xml(self.feed.generate())
        assert root.findtext(f"{ATOM}id") == "https://myblog.com"
        assert root.findtext(f"{ATOM}title") == "Test Blog"
        assert root.findtext(f"{ATOM}updated")

    def test_single_author(self, parse_xml):
        feed = BlogFeed(BlogFeedOptions(
            id="https://myblog.com",
            title="Test Blog",
            author=Author(name="John Doe", email="john@example.com", website="https://johndoe.com"),
        ))
        author = parse_xml(feed.generate()).find(f"{ATOM}author")
        assert author.findtext(f"{ATOM}name") == "John Doe"
        assert author.findtext(f"{ATOM}email") == "john@example.com"
        assert author.findtext(f"{ATOM}uri") == "https://johndoe.com"

    def test_author_and_authors_combined(self, parse_xml):
        feed = BlogFeed(BlogFeedOptions(
            id="https://myblog.com",
            title="Test Blog",
            author=Author(name="John Doe"),
            authors=[Author(name="Jane Smith"), Author(name="Bob Wilson")],
        ))
        root = parse_xml(feed.generate())
        names = [author.findtext(f"{ATOM}name") for author in root.findall(f"{ATOM}author")]
        assert names == ["John Doe", "Jane Smith", "Bob Wilson"]

    def test_description_used_as_subtitle(self, parse_xml):
        feed = BlogFeed(BlogFeedOptions(
            id="https://myblog.com", title="Test Blog", description="About <b>things</b>"
        ))
        subtitle = parse_xml(feed.generate()).find(f"{ATOM}subtitle")
        assert subtitle.text == "About <b>things</b>"
        assert subtitle.get("type") == "html"

    def test_plain_title_is_text(self):
        assert '<title type="text">Test Blog</title>' in self.feed.generate()

    def test_links_and_pagination(self, parse_xml):
        feed = BlogFeed(BlogFeedOptions(
            id="https://myblog.com",
            title="Test Blog",
            links="https://myblog.com/home",
            pagination=PaginationLinks(
                first="https://myblog.com/page/1",
                next="https://myblog.com/page/3",
                previous="https://myblog.com/page/1",
                current="https://myblog.com/page/2",
            ),
        ))
        assert _links(parse_xml(feed.generate())) == [
            ("alternate", "https://myblog.com/home"),
            ("first", "https://myblog.com/page/1"),
            ("next", "https://myblog.com/page/3"),
            ("previous", "https://myblog.com/page/1"),
            ("self", "https://myblog.com/page/2"),
        ]

    def test_language_and_stylesheet(self):
        feed = BlogFeed(BlogFeedOptions(
            id="https://myblog.com", title="Test Blog", language="en-US", stylesheet="/feed.xsl"
        ))
        xml = feed.generate()
        assert 'xml:lang="en-US"' in xml
        assert '<?xml-stylesheet type="text/xsl" href="/feed.xsl"?>' in xml

    def test_invalid_language(self):
        with pytest.raises(InvalidFormatError, match="Invalid language tag in feed"):
            BlogFeed(BlogFeedOptions(id="https://myblog.com", title="Test Blog", language="x"))


class TestBlogPosts:
    """Test post conversion and management."""

    def setup_method(self):
        """Set up test fixtures."""
        self.feed = BlogFeed(BlogFeedOptions(
            id="https://myblog.com",
            title="Test Blog",
            updated=datetime(2024, 1, 1, tzinfo=timezone.utc),
        ))

    def test_add_post(self, parse_xml):
        self.feed.add_post(BlogPost(
            id="post-1",
            title="First Post",
            content="<p>Hello</p>",
            content_type=TextType.HTML,
            summary="Short",
            author=Author(name="John Doe"),
            categories=["tech", "python"],
            links="https://myblog.com/post-1",
            published=datetime(2024, 1, 2, tzinfo=timezone.utc),
        ))
        entry = parse_xml(self.feed.generate()).find(f"{ATOM}entry")

        assert entry.findtext(f"{ATOM}id") == "post-1"
        assert entry.find(f"{ATOM}content").get("type") == "html"
        assert entry.findtext(f"{ATOM}content") == "<p>Hello</p>"
        assert entry.findtext(f"{ATOM}summary") == "Short"
        assert [c.get("term") for c in entry.findall(f"{ATOM}category")] == ["tech", "python"]
        assert entry.find(f"{ATOM}link").get("rel") == "alternate"
        # updated falls back to published
        assert entry.findtext(f"{ATOM}updated") == "2024-01-02T00:00:00.000Z"
        assert entry.findtext(f"{ATOM}published") == "2024-01-02T00:00:00.000Z"

    def test_default_content_type(self, parse_xml):
        self.feed.add_post(BlogPost(id="p", title="T", content="Body"))
        content = parse_xml(self.feed.generate()).find(f"{ATOM}entry/{ATOM}content")
        assert content.get("type") == "text"

    def test_posts_sorted_newest_first(self, parse_xml):
        for day in (1, 2, 3):
            self.feed.add_post(BlogPost(
                id=f"post-{day}", title=f"Post {day}", content="Body",
                updated=datetime(2024, 1, day, tzinfo=timezone.utc),
            ))
        assert _ids(parse_xml(self.feed.generate())) == ["post-3", "post-2", "post-1"]
        assert [post.id for post in self.feed.get_posts()] == ["post-1", "post-2", "post-3"]

    def test_remove_and_clear(self):
        self.feed.add_post(BlogPost(id="a", title="A", content="Body"))
        self.feed.add_post(BlogPost(id="b", title="B", content="Body"))

        assert self.feed.remove_post("a") is True
        assert self.feed.remove_post("a") is False
        assert [post.id for post in self.feed.get_posts()] == ["b"]

        self.feed.clear()
        assert self.feed.get_posts() == ()

    def test_invalid_author_email(self):
        with pytest.raises(InvalidFormatError, match="Invalid person email"):
            self.feed.add_post(BlogPost(
                id="a", title="A", content="Body", author=Author(name="X", email="bad")
            ))
        assert self.feed.get_posts() == ()


class TestPagination:
    """Test pagination helpers."""

    def setup_method(self):
        """Set up test fixtures."""
        self.feed = BlogFeed(BlogFeedOptions(
            id="https://myblog.com",
            title="Test Blog",
            links=["https://myblog.com"],
            pagination=PaginationLinks(first="https://myblog.com/page/1"),
        ))

    def test_get_pagination(self):
        assert self.feed.get_pagination() == PaginationLinks(first="https://myblog.com/page/1")

    def test_set_pagination_replaces_only_pagination_links(self, parse_xml):
        self.feed.set_pagination(PaginationLinks(
            next="https://myblog.com/page/2", current="https://myblog.com/page/1"
        ))

        assert _links(parse_xml(self.feed.generate())) == [
            ("alternate", "https://myblog.com"),
            ("next", "https://myblog.com/page/2"),
            ("self", "https://myblog.com/page/1"),
        ]
        assert self.feed.get_pagination() == PaginationLinks(
            next="https://myblog.com/page/2", current="https://myblog.com/page/1"
        )

    def test_invalid_pagination_keeps_links(self):
        with pytest.raises(InvalidFormatError):
            self.feed.set_pagination(PaginationLinks(next="not-a-uri"))
        assert self.feed.get_pagination().first == "https://myblog.com/page/1"
