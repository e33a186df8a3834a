"""Best-effort identification of the server stack behind a page."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Tuple
from urllib.parse import urlsplit

from .models import Page

PLATFORM_TYPES = {
    "servers": "Web servers",
    "languages": "Programming languages",
    "frameworks": "Frameworks",
}

PLATFORMS: Dict[str, Dict[str, str]] = {
    "servers": {
        "apache": "Apache",
        "iis": "IIS",
        "nginx": "Nginx",
        "tomcat": "TomCat",
    },
    "languages": {
        "asp": "ASP.NET",
        "java": "Java",
        "nodejs": "Node.js",
        "php": "PHP",
        "python": "Python",
        "ruby": "Ruby",
    },
    "frameworks": {
        "angular": "AngularJS",
        "django": "Django",
        "express": "Express",
        "rails": "Ruby on Rails",
        "wordpress": "WordPress",
    },
}

# (header, pattern, platforms)
_HEADER_HINTS: Tuple[Tuple[str, str, Tuple[str, ...]], ...] = (
    ("server", r"apache", ("apache",)),
    ("server", r"nginx", ("nginx",)),
    ("server", r"microsoft-iis", ("iis", "asp")),
    ("server", r"tomcat|coyote", ("tomcat", "java")),
    ("x-powered-by", r"php", ("php",)),
    ("x-powered-by", r"asp\.net", ("asp",)),
    ("x-powered-by", r"express", ("express", "nodejs")),
    ("x-powered-by", r"servlet|jsp", ("java",)),
    ("x-aspnet-version", r".", ("asp",)),
)

_COOKIE_HINTS: Dict[str, Tuple[str, ...]] = {
    "phpsessid": ("php",),
    "jsessionid": ("java",),
    "asp.net_sessionid": ("asp",),
    "csrftoken": ("django", "python"),
}

_EXTENSION_HINTS: Dict[str, Tuple[str, ...]] = {
    ".php": ("php",),
    ".asp": ("asp",),
    ".aspx": ("asp",),
    ".jsp": ("java",),
    ".do": ("java",),
    ".py": ("python",),
    ".rb": ("ruby",),
}

_BODY_HINTS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("wp-content", ("wordpress", "php")),
    ("ng-app", ("angular",)),
    ("csrfmiddlewaretoken", ("django", "python")),
    ('name="csrf-param"', ("rails", "ruby")),
)


def identify(page: Page) -> List[str]:
    """Platform shortnames suggested by ``page``'s headers, cookies, URL and body."""

    found: set[str] = set()
    headers = {name.lower(): str(value) for name, value in page.headers.items()}

    for header, pattern, platforms in _HEADER_HINTS:
        value = headers.get(header)
        if value and re.search(pattern, value, re.IGNORECASE):
            found.update(platforms)

    for name in _cookie_names(page, headers.get("set-cookie", "")):
        found.update(_COOKIE_HINTS.get(name, ()))

    path = urlsplit(page.dom.url).path.lower()
    for extension, platforms in _EXTENSION_HINTS.items():
        if path.endswith(extension):
            found.update(platforms)

    lowered = page.body.lower()
    for marker, platforms in _BODY_HINTS:
        if marker in lowered:
            found.update(platforms)

    return sorted(found)


def fullname(shortname: str) -> str:
    for platforms in PLATFORMS.values():
        if shortname in platforms:
            return platforms[shortname]
    return shortname


def list_platforms() -> Dict[str, Dict[str, str]]:
    """Every known platform, keyed by type description then shortname."""

    return {PLATFORM_TYPES[kind]: dict(platforms) for kind, platforms in PLATFORMS.items()}


def _cookie_names(page: Page, set_cookie: str) -> Iterable[str]:
    for cookie in page.cookies:
        name = cookie.get("name")
        if name:
            yield name.lower()
    for chunk in set_cookie.split(","):
        name, sep, _ = chunk.strip().partition("=")
        if sep:
            yield name.strip().lower()
