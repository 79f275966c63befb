"""Data models for CLI operations."""

from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional

from src.publisher.models import PublishResult, PublishStatus


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Every document was published or pulled
    - GENERAL_ERROR (1): Config or validation errors, or a failed document
    - AUTH_ERROR (3): Authentication or authorization failure
    - NETWORK_ERROR (4): Network connectivity or API availability issues

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 3
    NETWORK_ERROR = 4


@dataclass
class CliOptions:
    """Options shared by every command.

    Attributes:
        verbosity: 0=summary, 1=info, 2=debug
        no_color: Disable colored output
        config_path: Explicit config file, else .confluence-publish.yaml
        logdir: Directory for a timestamped log file
    """
    verbosity: int = 0
    no_color: bool = False
    config_path: Optional[str] = None
    logdir: Optional[str] = None


@dataclass
class PublishSummary:
    """Counts of publish results per terminal state.

    Example:
        >>> summary = PublishSummary.from_results(results)
        >>> summary.failed
        0
    """
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0

    @classmethod
    def from_results(cls, results: Iterable[PublishResult]) -> 'PublishSummary':
        counts = Counter(result.status for result in results)
        return cls(
            created=counts[PublishStatus.CREATED],
            updated=counts[PublishStatus.UPDATED],
            unchanged=counts[PublishStatus.UNCHANGED],
            failed=counts[PublishStatus.FAILED],
        )

    @property
    def total(self) -> int:
        return self.created + self.updated + self.unchanged + self.failed
