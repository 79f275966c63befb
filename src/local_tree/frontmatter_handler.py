"""YAML frontmatter parsing and generation for markdown files.

Frontmatter is the only state the publisher keeps next to a document:
the Confluence content id, the publish flag and the per-page settings
described in page_config.
"""

import re
from typing import Any, Dict, Tuple

import yaml

from .errors import FrontmatterError


class FrontmatterHandler:
    """Handles YAML frontmatter operations for markdown files."""

    # Regex pattern to match YAML frontmatter (between --- delimiters)
    FRONTMATTER_PATTERN = re.compile(
        r'^\s*---\s*\n(.*?)\n---\s*(?:\n|$)',
        re.DOTALL
    )

    # Maximum allowed depth for YAML structures to prevent DoS attacks
    MAX_YAML_DEPTH = 10

    @classmethod
    def _validate_yaml_depth(cls, obj, current_depth: int = 0, max_depth: int = MAX_YAML_DEPTH) -> None:
        """Validate that YAML structure depth doesn't exceed maximum.

        Raises:
            FrontmatterError: If depth exceeds maximum
        """
        if current_depth > max_depth:
            raise FrontmatterError(
                "<yaml>",
                f"YAML structure exceeds maximum depth of {max_depth}"
            )

        if isinstance(obj, dict):
            for value in obj.values():
                cls._validate_yaml_depth(value, current_depth + 1, max_depth)
        elif isinstance(obj, list):
            for item in obj:
                cls._validate_yaml_depth(item, current_depth + 1, max_depth)

    @classmethod
    def split(cls, file_path: str, content: str) -> Tuple[Dict[str, Any], str]:
        """Split markdown content into its frontmatter and body.

        Args:
            file_path: Path to the file (for error messages)
            content: Full markdown content including frontmatter

        Returns:
            Tuple of (frontmatter_dict, markdown_body).
            Returns ({}, content) if no frontmatter found.

        Raises:
            FrontmatterError: If frontmatter is malformed or has invalid YAML
        """
        match = cls.FRONTMATTER_PATTERN.match(content)
        if not match:
            return {}, content

        markdown_content = content[match.end():]

        try:
            frontmatter = yaml.safe_load(match.group(1))
        except yaml.YAMLError as e:
            raise FrontmatterError(file_path, f"Invalid YAML syntax: {str(e)}")

        if frontmatter is None:
            return {}, markdown_content

        if not isinstance(frontmatter, dict):
            raise FrontmatterError(
                file_path,
                f"Frontmatter must be a YAML dictionary, got {type(frontmatter).__name__}"
            )

        try:
            cls._validate_yaml_depth(frontmatter)
        except FrontmatterError as e:
            raise FrontmatterError(file_path, e.message)

        return frontmatter, markdown_content

    @classmethod
    def generate(cls, frontmatter: Dict[str, Any], body: str) -> str:
        """Generate markdown content with YAML frontmatter.

        Args:
            frontmatter: Keys to write, in order
            body: Markdown body

        Returns:
            Full markdown content; just the body when frontmatter is empty
        """
        if not frontmatter:
            return body

        yaml_str = yaml.safe_dump(
            frontmatter,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )
        return f"---\n{yaml_str}---\n{body}"

    @classmethod
    def update(cls, file_path: str, content: str, values: Dict[str, Any]) -> str:
        """Set or remove frontmatter keys, keeping every other key and the body.

        Args:
            file_path: Path to the file (for error messages)
            content: Full markdown content including frontmatter
            values: Keys to set; a value of None removes the key

        Returns:
            The rewritten markdown content
        """
        frontmatter, body = cls.split(file_path, content)
        for key, value in values.items():
            if value is None:
                frontmatter.pop(key, None)
            else:
                frontmatter[key] = value
        return cls.generate(frontmatter, body)
