"""Settings loading from YAML and the environment.

Values are merged in increasing precedence: built-in defaults, the YAML
config file, then environment variables (a local .env file is loaded
first through python-dotenv).
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .models import Settings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".confluence-publish.yaml"

ENV_VARS = {
    'confluence_base_url': 'CONFLUENCE_BASE_URL',
    'confluence_parent_id': 'CONFLUENCE_PARENT_ID',
    'atlassian_user_name': 'ATLASSIAN_USER_NAME',
    'atlassian_api_token': 'ATLASSIAN_API_TOKEN',
    'folder_to_publish': 'CONFLUENCE_FOLDER_TO_PUBLISH',
    'content_root': 'CONFLUENCE_CONTENT_ROOT',
}


class SettingsLoader:
    """Loads and validates Settings.

    Configuration file structure (every key optional, env wins):
        confluence_base_url: "https://example.atlassian.net"
        confluence_parent_id: "123456"
        atlassian_user_name: "me@example.com"
        folder_to_publish: "docs"
        content_root: "."
        first_heading_page_title: false
        default_space_key: "TEAM"
        max_workers: 4
    """

    REQUIRED_FIELDS = (
        'confluence_base_url',
        'confluence_parent_id',
        'atlassian_user_name',
        'atlassian_api_token',
    )

    DEFAULTS: Dict[str, Any] = {
        'folder_to_publish': '.',
        'content_root': '.',
        'first_heading_page_title': False,
        'default_space_key': None,
        'max_workers': 4,
    }

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> Settings:
        """Load settings.

        Args:
            config_path: Explicit YAML file; defaults to
                .confluence-publish.yaml in the working directory when present

        Returns:
            Settings object

        Raises:
            ConfigError: If the file is invalid or a required field is missing
        """
        load_dotenv()

        values: Dict[str, Any] = dict(cls.DEFAULTS)

        path = config_path
        if path is None and os.path.exists(DEFAULT_CONFIG_FILE):
            path = DEFAULT_CONFIG_FILE
        if path is not None:
            values.update(cls._read_yaml(path))

        for field_name, env_name in ENV_VARS.items():
            env_value = os.getenv(env_name)
            if env_value:
                values[field_name] = env_value

        return cls._build(values)

    @classmethod
    def _read_yaml(cls, config_path: str) -> Dict[str, Any]:
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigError(f"Configuration file not found: {config_path}")
        except OSError as e:
            raise ConfigError(f"Cannot read {config_path}: {e}")

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            return {}

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        known = set(cls.REQUIRED_FIELDS) | set(cls.DEFAULTS)
        unknown = sorted(set(config_dict) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")
        return {key: value for key, value in config_dict.items() if key in known}

    @classmethod
    def _build(cls, values: Dict[str, Any]) -> Settings:
        for field_name in cls.REQUIRED_FIELDS:
            value = values.get(field_name)
            if value is None or not str(value).strip():
                raise ConfigError(
                    f"Missing required value (set {ENV_VARS[field_name]} or add it to the config file)",
                    field_name
                )

        base_url = str(values['confluence_base_url']).strip().rstrip('/')
        if not base_url.startswith(('http://', 'https://')):
            raise ConfigError("Must be an http(s) URL", 'confluence_base_url')

        parent_id = str(values['confluence_parent_id']).strip()
        if not parent_id.isdigit():
            raise ConfigError("Must be a numeric page id", 'confluence_parent_id')

        try:
            max_workers = int(values['max_workers'])
        except (TypeError, ValueError):
            raise ConfigError("Must be an integer", 'max_workers')
        if max_workers < 1:
            raise ConfigError("Must be at least 1", 'max_workers')

        first_heading = values['first_heading_page_title']
        if isinstance(first_heading, str):
            first_heading = first_heading.strip().lower() in ('1', 'true', 'yes')

        return Settings(
            confluence_base_url=base_url,
            confluence_parent_id=parent_id,
            atlassian_user_name=str(values['atlassian_user_name']).strip(),
            atlassian_api_token=str(values['atlassian_api_token']).strip(),
            folder_to_publish=str(values['folder_to_publish']),
            content_root=os.path.abspath(str(values['content_root'])),
            first_heading_page_title=bool(first_heading),
            default_space_key=values['default_space_key'],
            max_workers=max_workers,
        )
