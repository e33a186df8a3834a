"""Base class for audit checks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, ClassVar, List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..core.component import Component
from ..core.models import Issue, Page

if TYPE_CHECKING:  # pragma: no cover - import-time type checking only
    from ..http.client import HttpClient
    from .timing import TimingAuditor


@dataclass
class CheckContext:
    """Services a check may use while it runs."""

    http: "HttpClient"
    log_issue: Callable[[Issue], None]
    timing: "TimingAuditor"


def query_parameters(url: str) -> List[Tuple[str, str]]:
    return parse_qsl(urlsplit(url).query, keep_blank_values=True)


def mutate_query(url: str, parameter: str, value: str) -> str:
    """``url`` with ``parameter`` set to ``value``, other parameters untouched."""

    parsed = urlsplit(url)
    items = [
        (name, value if name == parameter else current)
        for name, current in parse_qsl(parsed.query, keep_blank_values=True)
    ]
    return urlunsplit(parsed._replace(query=urlencode(items, doseq=True)))


class Check(Component):
    """Audits a single page; ``order`` decides the position in the schedule."""

    order: ClassVar[int] = 100
    severity: ClassVar[str] = "medium"

    def __init__(self, page: Page, context: CheckContext) -> None:
        self.page = page
        self.context = context

    @property
    def http(self) -> "HttpClient":
        return self.context.http

    def prepare(self) -> None:
        pass

    def run(self) -> None:
        raise NotImplementedError

    def clean_up(self) -> None:
        pass

    def log_issue(
        self,
        *,
        url: str,
        parameter: Optional[str] = None,
        proof: str = "",
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Issue:
        issue = Issue(
            check=self.name,
            name=name or self.info.get("issue", self.name),
            url=url,
            severity=self.severity,
            parameter=parameter,
            description=description or self.info.get("description", ""),
            proof=proof,
        )
        self.context.log_issue(issue)
        return issue
