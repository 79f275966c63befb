"""Unit tests for publisher.publisher module."""

import pytest

from src.adf.url_utils import page_url
from src.local_tree.filesystem_adaptor import FileSystemAdaptor
from src.local_tree.frontmatter_handler import FrontmatterHandler
from src.local_tree.models import MarkdownFile
from src.publisher.models import SAME, UPDATED, PublishStatus
from src.publisher.publisher import Publisher, matches_filter
from src.remote_tree.reconciler import BLANK_PAGE_ADF
from tests.fixtures.fake_confluence import OTHER_ACCOUNT_ID, FakeConfluence
from tests.fixtures.sample_markdown import markdown_file
from tests.fixtures.sample_settings import BASE_URL, make_settings


@pytest.fixture
def fake():
    return FakeConfluence()


@pytest.fixture
def root_id(fake):
    return fake.add_page("Root")


@pytest.fixture
def docs(tmp_path):
    path = tmp_path / "docs"
    path.mkdir()
    return path


def write(path, content):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def make_publisher(fake, docs, root_id, plugins=None):
    settings = make_settings(str(docs), parent_id=root_id)
    return Publisher(settings, fake, FileSystemAdaptor(settings), plugins)


def by_title(results):
    return {result.document.title: result for result in results}


class TestMatchesFilter:
    """Test cases for matches_filter."""

    FILE = MarkdownFile(
        folder_name="guides",
        absolute_file_path="/srv/docs/guides/setup.md",
        file_name="setup.md",
        contents="",
        page_title="setup",
    )

    @pytest.mark.parametrize("publish_filter", [
        "/srv/docs/guides/setup.md",
        "setup.md",
        "setup",
        "guides/setup.md",
        "guides/setup",
    ])
    def test_matching_filters(self, publish_filter):
        assert matches_filter(self.FILE, publish_filter, "/srv/docs")

    @pytest.mark.parametrize("publish_filter", ["other.md", "guides", "/srv/docs/setup.md"])
    def test_non_matching_filters(self, publish_filter):
        assert not matches_filter(self.FILE, publish_filter, "/srv/docs")


class TestPublish:
    """Test cases for Publisher.publish."""

    def test_single_file_hangs_below_parent(self, fake, docs, root_id):
        write(docs / "a.md", "Hello")

        results = make_publisher(fake, docs, root_id).publish()

        assert len(results) == 1
        result = results[0]
        assert result.status == PublishStatus.CREATED
        assert fake.pages[result.page_id]["ancestors"] == [root_id]
        assert fake.pages[result.page_id]["adf"] != BLANK_PAGE_ADF
        frontmatter, _ = FrontmatterHandler.split("a.md", (docs / "a.md").read_text())
        assert frontmatter == {"connie-publish": True, "connie-page-id": result.page_id}

    def test_folder_tree_is_created(self, fake, docs, root_id):
        write(docs / "a.md", "A body")
        write(docs / "guides" / "setup.md", "Setup body")

        results = by_title(make_publisher(fake, docs, root_id).publish())

        assert set(results) == {"docs", "a", "guides", "setup"}
        assert all(r.status == PublishStatus.CREATED for r in results.values())
        folder_id = results["docs"].page_id
        guides_id = results["guides"].page_id
        assert fake.pages[folder_id]["ancestors"] == [root_id]
        assert fake.pages[results["setup"].page_id]["ancestors"] == [root_id, folder_id, guides_id]

    def test_second_run_changes_nothing(self, fake, docs, root_id):
        write(docs / "a.md", markdown_file("A body\n\n![D](d.png)", tags=["one"]))
        write(docs / "b.md", "B body")
        (docs / "d.png").write_bytes(b"png")
        make_publisher(fake, docs, root_id).publish()
        fake.reset_calls()

        results = make_publisher(fake, docs, root_id).publish()

        assert [r.status for r in results] == [PublishStatus.UNCHANGED] * 3
        assert fake.created == []
        assert fake.updated == []
        assert fake.uploaded == []
        assert fake.labels_added == []

    def test_body_change_updates_page(self, fake, docs, root_id):
        write(docs / "a.md", "Old")
        first = make_publisher(fake, docs, root_id).publish()[0]
        content = (docs / "a.md").read_text().replace("Old", "New")
        write(docs / "a.md", content)

        result = make_publisher(fake, docs, root_id).publish()[0]

        assert result.status == PublishStatus.UPDATED
        assert result.content_result == UPDATED
        assert result.label_result == SAME
        assert fake.pages[first.page_id]["version"] == 3

    def test_labels_follow_tags(self, fake, docs, root_id):
        page_id = fake.add_page("a", parent_id=root_id, labels=["old", "keep"])
        write(docs / "a.md", markdown_file("Body", tags=["keep", "new"]))

        result = make_publisher(fake, docs, root_id).publish()[0]

        assert result.page_id == page_id
        assert result.label_result == UPDATED
        assert sorted(fake.pages[page_id]["labels"]) == ["keep", "new"]
        assert fake.labels_removed == ["old"]

    def test_images_are_uploaded(self, fake, docs, root_id):
        write(docs / "a.md", "![Diagram](images/d.png)")
        write(docs / "images" / "d.png", "png")

        result = make_publisher(fake, docs, root_id).publish()[0]

        assert result.image_result == UPDATED
        assert fake.uploaded == ["d.png"]
        media = fake.pages[result.page_id]["adf"]["content"][0]["content"][0]
        assert media["attrs"]["collection"] == f"contentId-{result.page_id}"
        assert "__fileName" not in media["attrs"]

    def test_image_name_with_space_and_accent_is_uploaded(self, fake, docs, root_id):
        write(docs / "a.md", "![Diagram](<images/café plan.png>)")
        (docs / "images" / "café plan.png").parent.mkdir()
        (docs / "images" / "café plan.png").write_bytes(b"png")

        result = make_publisher(fake, docs, root_id).publish()[0]

        assert fake.uploaded == ["café plan.png"]
        assert fake.pages[result.page_id]["adf"]["content"][0]["type"] == "mediaSingle"

    def test_wiki_links_point_at_published_pages(self, fake, docs, root_id):
        write(docs / "a.md", "See [[b]]")
        write(docs / "b.md", "B body")

        results = by_title(make_publisher(fake, docs, root_id).publish())

        paragraph = fake.pages[results["a"].page_id]["adf"]["content"][0]
        href = paragraph["content"][1]["marks"][0]["attrs"]["href"]
        assert href == page_url(BASE_URL, results["b"].page_id, "TEAM")

    def test_filter_publishes_only_selected_file(self, fake, docs, root_id):
        write(docs / "a.md", "A")
        write(docs / "b.md", "B")

        results = make_publisher(fake, docs, root_id).publish("a.md")

        assert [r.document.title for r in results] == ["a"]
        assert "b" not in [page["title"] for page in fake.pages.values()]

    @pytest.mark.parametrize("publish_filter,title", [("a", "a"), ("guides/setup.md", "setup")])
    def test_filter_after_full_publish_keeps_tree(self, fake, docs, root_id, publish_filter, title):
        """A filtered publish reuses the folder pages of a full publish."""
        # Arrange
        write(docs / "index.md", markdown_file("Welcome", title="Home"))
        write(docs / "a.md", "A body")
        write(docs / "guides" / "setup.md", "Setup body")
        make_publisher(fake, docs, root_id).publish()
        titles_before = sorted(page["title"] for page in fake.pages.values())
        ancestors_before = {page["title"]: list(page["ancestors"]) for page in fake.pages.values()}
        fake.reset_calls()

        # Act
        results = make_publisher(fake, docs, root_id).publish(publish_filter)

        # Assert
        assert [(r.document.title, r.status) for r in results] == [(title, PublishStatus.UNCHANGED)]
        assert fake.created == []
        assert fake.updated == []
        assert sorted(page["title"] for page in fake.pages.values()) == titles_before
        assert {page["title"]: page["ancestors"] for page in fake.pages.values()} == ancestors_before

    def test_page_edited_by_someone_else_fails(self, fake, docs, root_id):
        fake.add_page("a", parent_id=root_id, last_editor=OTHER_ACCOUNT_ID)
        write(docs / "a.md", "A")
        write(docs / "b.md", "B")

        results = by_title(make_publisher(fake, docs, root_id).publish())

        assert results["a"].status == PublishStatus.FAILED
        assert "another user" in results["a"].reason
        assert results["b"].status == PublishStatus.CREATED

    def test_declared_page_edited_by_someone_else_is_updated(self, fake, docs, root_id):
        page_id = fake.add_page("a", parent_id=root_id, last_editor=OTHER_ACCOUNT_ID, version=4)
        write(docs / "a.md", markdown_file("A", **{"connie-page-id": page_id}))

        result = make_publisher(fake, docs, root_id).publish()[0]

        assert result.status == PublishStatus.UPDATED
        assert fake.pages[page_id]["version"] == 5

    def test_content_type_change_fails(self, fake, docs, root_id):
        page_id = fake.add_page("a", parent_id=root_id)
        write(docs / "a.md", markdown_file("A", **{
            "connie-page-id": page_id,
            "connie-content-type": "blogpost",
        }))

        result = make_publisher(fake, docs, root_id).publish()[0]

        assert result.status == PublishStatus.FAILED
        assert "Cannot convert" in result.reason

    def test_ambiguous_title_fails_only_that_document(self, fake, docs, root_id):
        fake.add_page("b", parent_id=root_id)
        fake.add_page("b", parent_id=root_id)
        write(docs / "a.md", "A")
        write(docs / "b.md", "B")

        results = by_title(make_publisher(fake, docs, root_id).publish())

        assert results["b"].status == PublishStatus.FAILED
        assert "Several pages" in results["b"].reason
        assert results["a"].status == PublishStatus.CREATED

    def test_current_account_is_fetched_once(self, fake, docs, root_id):
        publisher = make_publisher(fake, docs, root_id)

        assert publisher.current_account_id() == fake.account_id
        fake.account_id = "changed"
        assert publisher.current_account_id() != "changed"
