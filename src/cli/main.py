"""Main CLI entry point for confluence-publish command.

This module provides the Typer application with two commands: ``publish``
pushes the local markdown tree to Confluence, ``pull`` writes Confluence
pages down as markdown files ready to be published again.
"""

import logging
import os
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

import typer

from src.cli.errors import OutputDirectoryError
from src.cli.models import CliOptions, ExitCode
from src.cli.output import OutputHandler
from src.confluence_client.api_wrapper import APIWrapper
from src.confluence_client.auth import Authenticator
from src.confluence_client.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    RateLimitError,
    SyncError,
)
from src.local_tree.filesystem_adaptor import FileSystemAdaptor
from src.pipeline.mermaid_plugin import MermaidRendererPlugin
from src.pipeline.mermaid_renderer import MermaidCliRenderer
from src.publisher.models import PublishStatus
from src.publisher.publisher import Publisher
from src.puller.puller import Puller
from src.settings.errors import ConfigError
from src.settings.settings_loader import SettingsLoader

VERSION = "0.1.0"

app = typer.Typer(
    name="confluence-publish",
    help="""Publish a folder of Markdown files as a Confluence page tree.

QUICK START:
  confluence-publish publish                    # Publish every publishable file
  confluence-publish publish docs/setup.md      # Publish a single file
  confluence-publish pull 123456 --children     # Pull a page tree as Markdown""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

# Module logger
logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)
    app_logger.handlers.clear()

    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"confluence-publish_{timestamp}.log"

        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt=date_format
        )
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _run(output: OutputHandler, action: Callable[[], ExitCode]) -> None:
    """Run a command body and exit with the code matching its outcome."""
    try:
        exit_code = action()

    except InvalidCredentialsError as e:
        logger.error(f"Authentication failed: {e}")
        output.error(f"Authentication failed: {e}")
        exit_code = ExitCode.AUTH_ERROR

    except (APIUnreachableError, APIAccessError, RateLimitError) as e:
        logger.error(f"Confluence API error: {e}")
        output.error(f"Confluence API error: {e}")
        exit_code = ExitCode.NETWORK_ERROR

    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        output.error(f"Configuration error: {e}")
        exit_code = ExitCode.GENERAL_ERROR

    except SyncError as e:
        logger.error(f"{type(e).__name__}: {e}")
        output.error(str(e))
        exit_code = ExitCode.GENERAL_ERROR

    except Exception as e:
        logger.exception("Unexpected error")
        output.error(f"Unexpected error: {e}")
        exit_code = ExitCode.GENERAL_ERROR

    raise typer.Exit(exit_code)


def _api(settings) -> APIWrapper:
    return APIWrapper(Authenticator(settings))


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Config file (default: .confluence-publish.yaml when present)",
        metavar="FILE",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Publish a folder of Markdown files as a Confluence page tree."""
    if version:
        typer.echo(f"confluence-publish version {VERSION}")
        raise typer.Exit()

    ctx.obj = CliOptions(
        verbosity=verbosity,
        no_color=no_color,
        config_path=config_path,
        logdir=logdir,
    )
    _configure_logging(verbosity, logdir)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command()
def publish(
    ctx: typer.Context,
    publish_filter: Optional[str] = typer.Argument(
        None,
        metavar="FILTER",
        help="Publish only this file (absolute path, file name or path relative to the content root)",
    ),
    mermaid: bool = typer.Option(
        False,
        "--mermaid",
        help="Render mermaid code blocks to images (needs mmdc on the PATH)",
    ),
) -> None:
    """Publish local Markdown files to Confluence."""
    options: CliOptions = ctx.obj
    output = OutputHandler(verbosity=options.verbosity, no_color=options.no_color)

    def action() -> ExitCode:
        settings = SettingsLoader.load(options.config_path)
        output.info(f"Content root: {settings.content_root}")
        output.info(f"Parent page: {settings.confluence_parent_id}")

        plugins = [MermaidRendererPlugin(MermaidCliRenderer())] if mermaid else []
        publisher = Publisher(settings, _api(settings), FileSystemAdaptor(settings), plugins)

        with output.spinner("Publishing to Confluence..."):
            results = publisher.publish(publish_filter)

        output.print_publish_results(results, settings.content_root)
        if any(r.status == PublishStatus.FAILED for r in results):
            return ExitCode.GENERAL_ERROR
        return ExitCode.SUCCESS

    _run(output, action)


@app.command()
def pull(
    ctx: typer.Context,
    page_id: str = typer.Argument(..., help="Id of the Confluence page to pull"),
    children: bool = typer.Option(
        False,
        "--children",
        help="Also pull every descendant page",
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth",
        min=0,
        help="Deepest level of descendants to pull (implies a tree pull)",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        help="Directory to write files to (default: the content root)",
        metavar="DIR",
    ),
    overwrite: bool = typer.Option(
        False,
        "--overwrite",
        help="Overwrite existing files",
    ),
) -> None:
    """Pull Confluence pages down as Markdown files."""
    options: CliOptions = ctx.obj
    output = OutputHandler(verbosity=options.verbosity, no_color=options.no_color)

    def action() -> ExitCode:
        settings = SettingsLoader.load(options.config_path)
        if output_dir:
            target = os.path.abspath(output_dir)
            try:
                os.makedirs(target, exist_ok=True)
            except OSError as e:
                raise OutputDirectoryError(target, str(e)) from e
            settings = replace(settings, content_root=target)

        puller = Puller(_api(settings), FileSystemAdaptor(settings))
        with output.spinner(f"Pulling page {page_id}..."):
            results = puller.pull(page_id, include_children=children, max_depth=max_depth, overwrite=overwrite)

        output.print_pull_results(results)
        if all(r.success for r in results):
            return ExitCode.SUCCESS
        return ExitCode.GENERAL_ERROR

    _run(output, action)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI application."""
    app(args=argv)


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
