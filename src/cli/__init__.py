"""Command-line interface for publishing Markdown to Confluence.

This package provides the `confluence-publish` CLI tool: `publish` pushes a
local Markdown tree to a Confluence page tree and `pull` brings pages back
down as Markdown files.
"""

from .errors import CLIError, OutputDirectoryError
from .models import CliOptions, ExitCode, PublishSummary
from .output import OutputHandler

__all__ = [
    'CLIError',
    'OutputDirectoryError',
    'CliOptions',
    'ExitCode',
    'PublishSummary',
    'OutputHandler',
]
