"""Mermaid chart renderers.

``MermaidCliRenderer`` renders charts with the mermaid CLI (``mmdc``) from
``@mermaid-js/mermaid-cli``, which must be on the PATH.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from typing import Dict, List, NamedTuple

from src.confluence_client.errors import ConversionError

logger = logging.getLogger(__name__)


class ChartData(NamedTuple):
    """A chart to render: attachment name and mermaid source."""
    name: str
    data: str


class MermaidRenderer(ABC):
    """Renders mermaid charts to PNG bytes."""

    @abstractmethod
    def capture_mermaid_charts(self, charts: List[ChartData]) -> Dict[str, bytes]:
        """Render charts, keyed by chart name."""


class MermaidCliRenderer(MermaidRenderer):
    """Renders charts by running ``mmdc`` once per chart.

    Raises:
        ConversionError: At construction, if ``mmdc`` is not installed
    """

    def __init__(self, executable: str = "mmdc", timeout: int = 60):
        resolved = shutil.which(executable)
        if resolved is None:
            raise ConversionError(
                f"{executable} not found - install @mermaid-js/mermaid-cli to render mermaid charts"
            )
        self.executable = resolved
        self.timeout = timeout

    def capture_mermaid_charts(self, charts: List[ChartData]) -> Dict[str, bytes]:
        """Render each chart; charts mmdc fails on are logged and left out."""
        rendered: Dict[str, bytes] = {}
        with tempfile.TemporaryDirectory(prefix="mermaid-") as workdir:
            for index, chart in enumerate(charts):
                source = os.path.join(workdir, f"chart-{index}.mmd")
                target = os.path.join(workdir, f"chart-{index}.png")
                with open(source, "w", encoding="utf-8") as f:
                    f.write(chart.data)

                try:
                    logger.debug(f"Rendering {chart.name}")
                    subprocess.run(
                        [self.executable, "-i", source, "-o", target, "-b", "transparent"],
                        capture_output=True,
                        text=True,
                        check=True,
                        timeout=self.timeout
                    )
                except subprocess.CalledProcessError as e:
                    logger.error(f"mmdc failed for {chart.name}, keeping its code block: {e.stderr}")
                    continue
                except subprocess.TimeoutExpired:
                    logger.error(f"Rendering {chart.name} timed out after {self.timeout}s, keeping its code block")
                    continue

                with open(target, "rb") as f:
                    rendered[chart.name] = f.read()
        return rendered
