"""Shared data structures used across the audit engine."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from bs4 import BeautifulSoup

from .uri import to_absolute

PATH_ATTRIBUTES = (
    ("a", "href"),
    ("area", "href"),
    ("link", "href"),
    ("form", "action"),
    ("frame", "src"),
    ("iframe", "src"),
    ("a", "routerlink"),
)


@dataclass(frozen=True)
class Transition:
    """A single DOM event that moved a page to a new state."""

    element: str
    event: str

    def __str__(self) -> str:
        return f"'{self.event}' on: {self.element}"


@dataclass
class DomState:
    """URL and transition history of a rendered page."""

    url: str
    transitions: list[Transition] = field(default_factory=list)
    root_url: str = ""

    def __post_init__(self) -> None:
        # Transitions replay from the URL the browser was pointed at.
        if not self.root_url:
            self.root_url = self.url

    @property
    def depth(self) -> int:
        return len(self.transitions)


@dataclass
class Page:
    """A fetched resource plus its resolved DOM state and sub-paths.

    A ``code`` of ``0`` means the server never answered.
    """

    url: str
    code: int
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    cookies: list[dict] = field(default_factory=list)
    paths: list[str] = field(default_factory=list)
    has_script: bool = False
    dom: DomState = field(default_factory=lambda: DomState(url=""))
    response_time: float = 0.0
    platforms: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.dom.url:
            self.dom = DomState(url=self.url)

    @classmethod
    def empty(cls, url: str) -> "Page":
        return cls(url=url, code=0)

    @classmethod
    def from_response(
        cls,
        url: str,
        code: int,
        body: str = "",
        *,
        headers: Optional[dict[str, str]] = None,
        cookies: Optional[Iterable[dict]] = None,
        dom_url: Optional[str] = None,
        root_url: Optional[str] = None,
        transitions: Optional[Iterable[Transition]] = None,
        response_time: float = 0.0,
    ) -> "Page":
        """Builds a page, extracting sub-paths and script presence from ``body``."""

        base = dom_url or url
        paths: list[str] = []
        has_script = False
        if body:
            soup = BeautifulSoup(body, "html.parser")
            paths = extract_paths(soup, base)
            has_script = _has_script(soup)

        return cls(
            url=url,
            code=code,
            body=body,
            headers=dict(headers or {}),
            cookies=list(cookies or []),
            paths=paths,
            has_script=has_script,
            dom=DomState(url=base, transitions=list(transitions or []), root_url=root_url or ""),
            response_time=response_time,
        )

    @property
    def fingerprint(self) -> str:
        digest = hashlib.sha1()
        digest.update(self.dom.url.encode("utf-8"))
        digest.update(self.dom.root_url.encode("utf-8"))
        digest.update(str(self.code).encode("ascii"))
        digest.update(self.body.encode("utf-8", "replace"))
        for transition in self.dom.transitions:
            digest.update(f"{transition.event}:{transition.element}".encode("utf-8", "replace"))
        return digest.hexdigest()


def extract_paths(soup: BeautifulSoup, base_url: str) -> list[str]:
    seen: set[str] = set()
    paths: list[str] = []
    for tag_name, attribute in PATH_ATTRIBUTES:
        for tag in soup.find_all(tag_name):
            normalized = to_absolute(base_url, tag.get(attribute))
            if normalized and normalized not in seen:
                seen.add(normalized)
                paths.append(normalized)
    return paths


def _has_script(soup: BeautifulSoup) -> bool:
    if soup.find("script") is not None:
        return True
    for tag in soup.find_all(True):
        if any(name.lower().startswith("on") for name in tag.attrs):
            return True
        href = tag.get("href")
        if isinstance(href, str) and href.strip().lower().startswith("javascript:"):
            return True
    return False


@dataclass
class Issue:
    """A vulnerability logged by a check."""

    check: str
    name: str
    url: str
    severity: str = "medium"
    parameter: Optional[str] = None
    description: str = ""
    proof: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "check": self.check,
            "name": self.name,
            "url": self.url,
            "severity": self.severity,
            "parameter": self.parameter,
            "description": self.description,
            "proof": self.proof,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Issue":
        return cls(
            check=data.get("check", ""),
            name=data.get("name", ""),
            url=data.get("url", ""),
            severity=data.get("severity", "medium"),
            parameter=data.get("parameter"),
            description=data.get("description", ""),
            proof=data.get("proof", ""),
        )
