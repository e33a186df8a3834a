"""URL normalisation helpers."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse

IGNORED_SCHEMES = frozenset({"javascript", "mailto", "tel", "data"})


def to_absolute(base_url: str, href: Optional[str]) -> Optional[str]:
    """Resolve ``href`` against ``base_url``.

    SPA router fragments (``#/route``) are kept, every other fragment is
    dropped so that ``/page#top`` and ``/page`` share one fingerprint.
    """

    if not href:
        return None

    href = href.strip()
    if not href:
        return None
    scheme = urlparse(href).scheme.lower()
    if scheme in IGNORED_SCHEMES:
        return None

    if href.startswith("#/"):
        parsed = urlparse(base_url)
        joined = f"{parsed.scheme}://{parsed.netloc}/{href}"
    elif href.startswith("/"):
        parsed = urlparse(base_url)
        joined = urljoin(f"{parsed.scheme}://{parsed.netloc}", href)
    else:
        joined = urljoin(base_url, href)

    parsed = urlparse(joined)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        return None

    keep_fragment = bool(parsed.fragment and parsed.fragment.startswith("/"))
    sanitized = parsed if keep_fragment else parsed._replace(fragment="")
    return urlunparse(sanitized)
