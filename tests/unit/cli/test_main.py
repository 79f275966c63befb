"""Unit tests for main CLI entry point (main.py).

Tests the Typer CLI application using CliRunner.
"""

import logging
import os
import pytest
from unittest.mock import Mock, patch, MagicMock
from typer.testing import CliRunner

from src.cli.main import app, _configure_logging, VERSION
from src.cli.models import ExitCode
from src.confluence_client.errors import APIUnreachableError, InvalidCredentialsError
from src.local_tree.models import LocalDocument
from src.publisher.models import PublishResult, PublishStatus
from src.puller.puller import PullResult
from src.settings.errors import ConfigError
from tests.fixtures.sample_settings import make_settings


runner = CliRunner()

DOCUMENT = LocalDocument(
    absolute_path="/docs/a.md",
    file_name="a.md",
    folder_name="docs",
    transcoded_content={"type": "doc", "version": 1, "content": []},
    title="A",
)


@pytest.fixture(autouse=True)
def restore_app_logger():
    """Keep handlers attached by the CLI from leaking into other tests."""
    app_logger = logging.getLogger("src")
    handlers, level = list(app_logger.handlers), app_logger.level
    yield
    app_logger.handlers[:] = handlers
    app_logger.setLevel(level)


class TestConfigureLogging:
    """Test cases for _configure_logging function."""

    def test_verbosity_0_sets_warning_level(self):
        """Verbosity 0 sets logging to WARNING level."""
        with patch('logging.getLogger') as mock_get_logger:
            mock_app_logger = MagicMock()
            mock_get_logger.return_value = mock_app_logger

            _configure_logging(0)

            mock_get_logger.assert_called_with("src")
            mock_app_logger.setLevel.assert_called_with(logging.WARNING)

    def test_verbosity_1_sets_info_level(self):
        """Verbosity 1 sets logging to INFO level."""
        with patch('logging.getLogger') as mock_get_logger:
            mock_app_logger = MagicMock()
            mock_get_logger.return_value = mock_app_logger

            _configure_logging(1)

            mock_app_logger.setLevel.assert_called_with(logging.INFO)

    def test_verbosity_2_sets_debug_level(self):
        """Verbosity 2+ sets logging to DEBUG level."""
        with patch('logging.getLogger') as mock_get_logger:
            mock_app_logger = MagicMock()
            mock_get_logger.return_value = mock_app_logger

            _configure_logging(2)

            mock_app_logger.setLevel.assert_called_with(logging.DEBUG)

    def test_logdir_creates_timestamped_log_file(self, tmp_path):
        """--logdir writes a confluence-publish_<timestamp>.log file."""
        logdir = tmp_path / "logs"

        _configure_logging(1, str(logdir))

        app_logger = logging.getLogger("src")
        file_handlers = [h for h in app_logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert os.path.basename(file_handlers[0].baseFilename).startswith("confluence-publish_")
        file_handlers[0].close()


class TestMainCallback:
    """Test cases for global options."""

    def test_version_flag(self):
        """--version prints the version and exits successfully."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"confluence-publish version {VERSION}" in result.output

    def test_no_command_shows_help(self):
        """Running without a command shows the help text."""
        result = runner.invoke(app, [])

        assert "publish" in result.output
        assert "pull" in result.output


@patch('src.cli.main.FileSystemAdaptor')
@patch('src.cli.main.Authenticator')
@patch('src.cli.main.APIWrapper')
@patch('src.cli.main.SettingsLoader')
class TestPublishCommand:
    """Test cases for the publish command."""

    @patch('src.cli.main.Publisher')
    def test_publish_success(self, mock_publisher, mock_loader, mock_api, mock_auth, mock_adaptor):
        """All documents published exits with SUCCESS."""
        # Arrange
        mock_loader.load.return_value = make_settings("/docs")
        mock_instance = Mock()
        mock_instance.publish.return_value = [
            PublishResult(DOCUMENT, PublishStatus.CREATED, "1001", content_result="updated"),
        ]
        mock_publisher.return_value = mock_instance

        # Act
        result = runner.invoke(app, ["--no-color", "publish"])

        # Assert
        assert result.exit_code == ExitCode.SUCCESS
        mock_instance.publish.assert_called_once_with(None)
        assert "Publish completed successfully" in result.output
        assert "[content]" in result.output

    @patch('src.cli.main.Publisher')
    def test_publish_with_filter_and_config(self, mock_publisher, mock_loader, mock_api, mock_auth, mock_adaptor):
        """The FILTER argument and --config option are passed through."""
        # Arrange
        mock_loader.load.return_value = make_settings("/docs")
        mock_publisher.return_value.publish.return_value = []

        # Act
        result = runner.invoke(app, ["--no-color", "--config", "custom.yaml", "publish", "guides/setup.md"])

        # Assert
        assert result.exit_code == ExitCode.SUCCESS
        mock_loader.load.assert_called_once_with("custom.yaml")
        mock_publisher.return_value.publish.assert_called_once_with("guides/setup.md")
        assert "No pages to publish" in result.output

    @patch('src.cli.main.Publisher')
    def test_failed_document_exits_with_general_error(self, mock_publisher, mock_loader, mock_api, mock_auth, mock_adaptor):
        """Any failed document makes the run exit with GENERAL_ERROR."""
        # Arrange
        mock_loader.load.return_value = make_settings("/docs")
        mock_publisher.return_value.publish.return_value = [
            PublishResult(DOCUMENT, PublishStatus.FAILED, reason="Page [a] is outside the tree"),
        ]

        # Act
        result = runner.invoke(app, ["--no-color", "publish"])

        # Assert
        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "Page [a] is outside the tree" in result.output
        assert "Publish completed with failures" in result.output

    @patch('src.cli.main.MermaidCliRenderer')
    @patch('src.cli.main.MermaidRendererPlugin')
    @patch('src.cli.main.Publisher')
    def test_mermaid_flag_adds_plugin(
        self, mock_publisher, mock_plugin, mock_renderer, mock_loader, mock_api, mock_auth, mock_adaptor
    ):
        """--mermaid registers the mermaid renderer plugin."""
        # Arrange
        mock_loader.load.return_value = make_settings("/docs")
        mock_publisher.return_value.publish.return_value = []

        # Act
        result = runner.invoke(app, ["--no-color", "publish", "--mermaid"])

        # Assert
        assert result.exit_code == ExitCode.SUCCESS
        mock_plugin.assert_called_once_with(mock_renderer.return_value)
        assert mock_publisher.call_args[0][3] == [mock_plugin.return_value]

    @patch('src.cli.main.Publisher')
    def test_invalid_credentials_exit_code(self, mock_publisher, mock_loader, mock_api, mock_auth, mock_adaptor):
        """Authentication failures exit with AUTH_ERROR."""
        mock_loader.load.return_value = make_settings("/docs")
        mock_publisher.return_value.publish.side_effect = InvalidCredentialsError(
            "me@example.com", "https://example.atlassian.net"
        )

        result = runner.invoke(app, ["--no-color", "publish"])

        assert result.exit_code == ExitCode.AUTH_ERROR

    @patch('src.cli.main.Publisher')
    def test_unreachable_api_exit_code(self, mock_publisher, mock_loader, mock_api, mock_auth, mock_adaptor):
        """Network failures exit with NETWORK_ERROR."""
        mock_loader.load.return_value = make_settings("/docs")
        mock_publisher.return_value.publish.side_effect = APIUnreachableError(
            "https://example.atlassian.net"
        )

        result = runner.invoke(app, ["--no-color", "publish"])

        assert result.exit_code == ExitCode.NETWORK_ERROR

    def test_config_error_exit_code(self, mock_loader, mock_api, mock_auth, mock_adaptor):
        """Configuration errors exit with GENERAL_ERROR and explain the field."""
        mock_loader.load.side_effect = ConfigError("Missing required value", "confluence_base_url")

        result = runner.invoke(app, ["--no-color", "publish"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "confluence_base_url" in result.output


@patch('src.cli.main.FileSystemAdaptor')
@patch('src.cli.main.Authenticator')
@patch('src.cli.main.APIWrapper')
@patch('src.cli.main.SettingsLoader')
@patch('src.cli.main.Puller')
class TestPullCommand:
    """Test cases for the pull command."""

    def test_pull_single_page(self, mock_puller, mock_loader, mock_api, mock_auth, mock_adaptor):
        """pull PAGE_ID pulls one page."""
        # Arrange
        mock_loader.load.return_value = make_settings("/docs")
        mock_puller.return_value.pull.return_value = [PullResult("123", "Setup", "/docs/setup.md")]

        # Act
        result = runner.invoke(app, ["--no-color", "pull", "123"])

        # Assert
        assert result.exit_code == ExitCode.SUCCESS
        mock_puller.return_value.pull.assert_called_once_with(
            "123", include_children=False, max_depth=None, overwrite=False
        )
        assert "Pull completed successfully" in result.output

    def test_pull_tree_options(self, mock_puller, mock_loader, mock_api, mock_auth, mock_adaptor):
        """--children, --max-depth and --overwrite are passed through."""
        mock_loader.load.return_value = make_settings("/docs")
        mock_puller.return_value.pull.return_value = []

        result = runner.invoke(app, ["--no-color", "pull", "123", "--children", "--max-depth", "2", "--overwrite"])

        assert result.exit_code == ExitCode.SUCCESS
        mock_puller.return_value.pull.assert_called_once_with(
            "123", include_children=True, max_depth=2, overwrite=True
        )

    def test_negative_max_depth_is_rejected(self, mock_puller, mock_loader, mock_api, mock_auth, mock_adaptor):
        """--max-depth must not be negative."""
        result = runner.invoke(app, ["pull", "123", "--max-depth", "-1"])

        assert result.exit_code != 0
        mock_puller.assert_not_called()

    def test_output_dir_replaces_content_root(self, mock_puller, mock_loader, mock_api, mock_auth, mock_adaptor, tmp_path):
        """--output-dir is created and used as the content root."""
        # Arrange
        mock_loader.load.return_value = make_settings("/docs")
        mock_puller.return_value.pull.return_value = []
        target = tmp_path / "out"

        # Act
        result = runner.invoke(app, ["--no-color", "pull", "123", "--output-dir", str(target)])

        # Assert
        assert result.exit_code == ExitCode.SUCCESS
        assert target.is_dir()
        assert mock_adaptor.call_args[0][0].content_root == str(target)

    def test_failed_page_exits_with_general_error(self, mock_puller, mock_loader, mock_api, mock_auth, mock_adaptor):
        """A page that could not be pulled exits with GENERAL_ERROR."""
        mock_loader.load.return_value = make_settings("/docs")
        mock_puller.return_value.pull.return_value = [PullResult("123", error="Page 123 not found")]

        result = runner.invoke(app, ["--no-color", "pull", "123"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "Page 123 not found" in result.output
