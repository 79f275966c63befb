"""Unit tests for cli.output module."""

from src.cli.output import OutputHandler
from src.local_tree.models import LocalDocument
from src.publisher.models import UPDATED, PublishResult, PublishStatus
from src.puller.puller import PullResult


def document(title):
    return LocalDocument(
        absolute_path=f"/docs/{title}.md",
        file_name=f"{title}.md",
        folder_name="docs",
        transcoded_content={"type": "doc", "version": 1, "content": []},
        title=title,
    )


def captured(handler, action):
    with handler.console.capture() as capture:
        action()
    return capture.get()


class TestOutputHandlerInit:
    """Test cases for OutputHandler initialization."""

    def test_init_default_verbosity_and_color(self):
        """Initialize with default verbosity (0) and color enabled."""
        handler = OutputHandler()

        assert handler.verbosity == 0
        assert handler.console.no_color is False

    def test_init_no_color_true(self):
        """Initialize with no_color=True disables colors."""
        handler = OutputHandler(no_color=True)

        assert handler.console.no_color is True


class TestMessages:
    """Test cases for status messages."""

    def test_info_hidden_at_verbosity_0(self):
        """info() prints nothing at verbosity 0."""
        handler = OutputHandler(verbosity=0, no_color=True)

        assert captured(handler, lambda: handler.info("details")) == ""

    def test_info_shown_at_verbosity_1(self):
        """info() prints at verbosity 1."""
        handler = OutputHandler(verbosity=1, no_color=True)

        assert "details" in captured(handler, lambda: handler.info("details"))

    def test_error_and_warning(self):
        """error() and warning() prefix their symbols."""
        handler = OutputHandler(no_color=True)

        output = captured(handler, lambda: (handler.error("bad"), handler.warning("careful")))

        assert "✗ bad" in output
        assert "⚠ careful" in output

    def test_spinner_without_color_prints_message(self):
        """Without colors the spinner message is printed once."""
        handler = OutputHandler(no_color=True)

        def run():
            with handler.spinner("Working..."):
                pass

        assert "Working..." in captured(handler, run)


class TestPublishResults:
    """Test cases for print_publish_results."""

    def test_summary_counts(self):
        """Each terminal state is counted in the summary."""
        handler = OutputHandler(no_color=True)
        results = [
            PublishResult(document("a"), PublishStatus.CREATED, "1"),
            PublishResult(document("b"), PublishStatus.UPDATED, "2", label_result=UPDATED),
            PublishResult(document("c"), PublishStatus.UNCHANGED, "3"),
        ]

        output = captured(handler, lambda: handler.print_publish_results(results, "/docs"))

        assert "Created: 1 page(s)" in output
        assert "Updated: 1 page(s)" in output
        assert "Unchanged: 1 page(s)" in output
        assert "b.md) [labels]" in output
        assert "Publish completed successfully" in output

    def test_nothing_changed(self):
        """A run without changes says so."""
        handler = OutputHandler(no_color=True)
        results = [PublishResult(document("a"), PublishStatus.UNCHANGED, "1")]

        output = captured(handler, lambda: handler.print_publish_results(results))

        assert "Already up to date" in output

    def test_failures_show_reason(self):
        """Failed documents print their reason."""
        handler = OutputHandler(no_color=True)
        results = [PublishResult(document("a"), PublishStatus.FAILED, reason="Several pages are titled")]

        output = captured(handler, lambda: handler.print_publish_results(results))

        assert "Several pages are titled" in output
        assert "Failed: 1 page(s)" in output
        assert "Publish completed with failures" in output

    def test_no_results(self):
        """An empty run prints a hint."""
        handler = OutputHandler(no_color=True)

        assert "No pages to publish" in captured(handler, lambda: handler.print_publish_results([]))


class TestPullResults:
    """Test cases for print_pull_results."""

    def test_success_and_failure(self):
        """Pulled and failed pages are both reported."""
        handler = OutputHandler(no_color=True)
        results = [
            PullResult("1", "Setup", "/docs/setup.md"),
            PullResult("2", error="Page 2 not found"),
        ]

        output = captured(handler, lambda: handler.print_pull_results(results))

        assert "Setup → /docs/setup.md" in output
        assert "2: Page 2 not found" in output
        assert "Pulled: 1 page(s)" in output
        assert "Pull completed with failures" in output
