"""URL helpers used when rewriting link targets for Confluence."""

import re
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

_SAFE_URL_PATTERNS = [
    re.compile(pattern, re.IGNORECASE) for pattern in (
        r'^https?://',
        r'^ftps?://',
        r'^/',
        r'^mailto:',
        r'^skype:',
        r'^callto:',
        r'^facetime:',
        r'^git:',
        r'^irc6?:',
        r'^news:',
        r'^nntp:',
        r'^feed:',
        r'^cvs:',
        r'^svn:',
        r'^mvn:',
        r'^ssh:',
        r'^scp://',
        r'^sftp://',
        r'^itms:',
        r'^notes:',
        r'^sourcetree:',
        r'^urn:',
        r'^tel:',
        r'^xmpp:',
        r'^telnet:',
        r'^vnc:',
        r'^rdp:',
        r'^whatsapp:',
        r'^slack:',
        r'^sips?:',
        r'^magnet:',
        r'^#',
    )
]

_SCHEME = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*:')

# Query parameters Confluence appends to shared links
_TRACKING_PARAMS = {"atlOrigin"}


def is_safe_url(url: str) -> bool:
    """Check a link target against the schemes Confluence renders as links.

    Blank targets count as safe here; callers treat them separately.
    """
    trimmed = url.strip()
    if not trimmed:
        return True
    return any(pattern.match(trimmed) for pattern in _SAFE_URL_PATTERNS)


def convert_relative_url_to_full(href: str, base_url: str) -> Optional[str]:
    """Best-effort conversion of a relative link into an absolute URL.

    ``./path`` and ``../path`` are resolved against the path of
    ``base_url``; a bare page name (no slash, backslash or colon) becomes a
    space URL on the same site.

    Returns:
        The absolute URL, or None when ``href`` is not a relative link this
        function knows how to handle
    """
    if not href or href.startswith(('#', 'mailto:', 'tel:')):
        return None

    if _SCHEME.match(href):
        return None

    base = urlparse(base_url)
    if not base.scheme or not base.netloc:
        return None
    origin = f"{base.scheme}://{base.netloc}"

    if href.startswith('./') or href.startswith('../'):
        base_path = base.path.rstrip('/')
        if href.startswith('./'):
            return f"{origin}{base_path}/{href[2:]}"
        return f"{origin}{base_path}/{href}"

    if '/' not in href and '\\' not in href and ':' not in href:
        page_name = re.sub(r'\s+', '_', href)
        return f"{origin}/wiki/spaces/{page_name}"

    return None


def clean_up_url_if_confluence(url: str, base_url: str) -> str:
    """Normalize a URL before it is embedded as an inline card.

    Returns:
        ``#`` when the URL cannot be embedded (not http(s) or malformed);
        the URL without Confluence tracking parameters when it points at
        the same site as ``base_url``; otherwise the URL unchanged
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return "#"
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return "#"

    base = urlparse(base_url)
    if parsed.netloc.lower() != base.netloc.lower():
        return url

    query = [(key, value) for key, value in parse_qsl(parsed.query, keep_blank_values=True)
             if key not in _TRACKING_PARAMS]
    return urlunparse(parsed._replace(query=urlencode(query)))


def page_url(base_url: str, page_id: str, space_key: Optional[str] = None) -> str:
    """Build the browser URL of a Confluence page.

    Example:
        >>> page_url("https://example.atlassian.net", "42", "TEAM")
        'https://example.atlassian.net/wiki/spaces/TEAM/pages/42'
    """
    base = base_url.rstrip('/')
    if base.endswith('/wiki'):
        base = base[:-len('/wiki')]
    if space_key:
        return f"{base}/wiki/spaces/{space_key}/pages/{page_id}"
    return f"{base}/wiki/pages/viewpage.action?pageId={page_id}"
