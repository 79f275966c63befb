"""Credentials for the Confluence client.

The settings object has already merged the config file, ``.env`` and the
environment (see ``src.settings``); this module only picks the three values
the HTTP client needs and refuses to start without them.
"""

from typing import NamedTuple, TYPE_CHECKING

from .errors import InvalidCredentialsError

if TYPE_CHECKING:
    from src.settings.models import Settings


class Credentials(NamedTuple):
    """Site URL, Atlassian account and API token."""
    url: str
    user: str
    api_token: str


class Authenticator:
    """Hands the API wrapper its credentials. Nothing is cached or logged.

    Example:
        >>> creds = Authenticator(settings).get_credentials()
        >>> creds.url
        'https://example.atlassian.net'
    """

    def __init__(self, settings: "Settings"):
        self._settings = settings

    def get_credentials(self) -> Credentials:
        """Return the credentials of the current settings.

        Raises:
            InvalidCredentialsError: If the URL, user name or token is empty
        """
        settings = self._settings
        if not (settings.confluence_base_url and settings.atlassian_user_name and settings.atlassian_api_token):
            raise InvalidCredentialsError(
                user=settings.atlassian_user_name or "unknown",
                endpoint=settings.confluence_base_url or "unknown",
            )

        return Credentials(
            url=settings.confluence_base_url.rstrip("/"),
            user=settings.atlassian_user_name,
            api_token=settings.atlassian_api_token,
        )
