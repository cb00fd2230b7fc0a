"""
HLS playlist URI rewriting.

Every URI a playlist references (bare segment/variant lines and ``URI="..."``
attributes of directives such as EXT-X-KEY, EXT-X-MAP or EXT-X-MEDIA) is
replaced by a proxy-relative URL carrying the absolute upstream URL as a
percent-encoded ``url`` parameter. Everything else is left byte-for-byte
untouched, so the result is still a valid playlist.

Example::

    >>> rewrite_playlist("#EXTM3U\\nseg0.ts\\n", "https://cdn.example/a/index.m3u8")
    '#EXTM3U\\n/api/v1/streamingProxy?url=https%3A%2F%2Fcdn.example%2Fa%2Fseg0.ts\\n'
"""

import re
from urllib.parse import quote, urljoin, urlsplit

PROXY_PATH = "/api/v1/streamingProxy"

# Attribute names are upper-case per RFC 8216; require a delimiter before
# URI so that no other attribute ending in "URI" is matched.
_URI_ATTRIBUTE = re.compile(r'(?<![A-Z0-9-])URI="([^"]*)"')

_PROXIABLE_SCHEMES = ("http", "https")


def _proxy_prefix(proxy_path: str) -> str:
    return f"{proxy_path}?url="


def is_proxied(uri: str, proxy_path: str = PROXY_PATH) -> bool:
    """True if ``uri`` already points at the proxy endpoint."""
    return uri.startswith(_proxy_prefix(proxy_path))


def resolve_uri(uri: str, base_url: str) -> str:
    """Resolve a playlist reference against the playlist's own URL."""
    return urljoin(base_url, uri)


def proxy_uri(absolute_url: str, proxy_path: str = PROXY_PATH) -> str:
    return _proxy_prefix(proxy_path) + quote(absolute_url, safe="")


def rewrite_uri(uri: str, base_url: str, proxy_path: str = PROXY_PATH) -> str:
    """
    Rewrite a single reference.

    Already-proxied references and references that do not resolve to an
    http(s) URL (``data:``, ``skd://`` key URIs, ...) are returned unchanged.
    """
    if is_proxied(uri, proxy_path):
        return uri
    absolute = resolve_uri(uri, base_url)
    if urlsplit(absolute).scheme.lower() not in _PROXIABLE_SCHEMES:
        return uri
    return proxy_uri(absolute, proxy_path)


_LINE_BREAK = re.compile(r"(\r\n|\r|\n)")


def _rewrite_directive(line: str, base_url: str, proxy_path: str) -> str:
    if "URI=" not in line:
        return line
    return _URI_ATTRIBUTE.sub(
        lambda m: f'URI="{rewrite_uri(m.group(1), base_url, proxy_path)}"'
        if m.group(1) else m.group(0),
        line,
    )


def rewrite_line(line: str, base_url: str, proxy_path: str = PROXY_PATH) -> str:
    """Rewrite one line (without its terminator)."""
    stripped = line.strip()
    if not stripped:
        return line
    if stripped.startswith("#"):
        return _rewrite_directive(line, base_url, proxy_path)
    return rewrite_uri(stripped, base_url, proxy_path)


def rewrite_playlist(text: str, base_url: str, proxy_path: str = PROXY_PATH) -> str:
    """
    Rewrite every URI reference in an HLS playlist to go through the proxy.

    Args:
        text: Playlist document
        base_url: URL the playlist was fetched from; relative references are
            resolved against its directory
        proxy_path: Path of the proxy endpoint the rewritten URIs point at

    Returns:
        The rewritten playlist. Line order and line terminators are
        preserved, and rewriting an already rewritten playlist is a no-op.
    """
    parts = _LINE_BREAK.split(text)
    # even indices are line bodies, odd indices the terminators between them
    for i in range(0, len(parts), 2):
        parts[i] = rewrite_line(parts[i], base_url, proxy_path)
    return "".join(parts)
