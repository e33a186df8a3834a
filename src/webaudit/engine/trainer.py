"""Learns new pages from the responses checks receive while auditing."""

from __future__ import annotations

import logging
from typing import Callable, Hashable, Tuple
from urllib.parse import parse_qsl, urlsplit

from ..core.models import Page
from ..recon.targeting import ScopeFilter
from .queues import DedupFilter

logger = logging.getLogger(__name__)


def element_key(url: str) -> Tuple[Hashable, ...]:
    """Identity of a link that ignores parameter values.

    Payload-carrying variants of a known link share its key, so injected
    values never count as new elements.
    """

    parts = urlsplit(url)
    names = tuple(sorted({name for name, _ in parse_qsl(parts.query, keep_blank_values=True)}))
    return (parts.scheme, parts.netloc, parts.path, names)


class Trainer:
    """Pushes check responses that reveal unseen in-scope links to the page queue."""

    def __init__(
        self,
        scope: ScopeFilter,
        push_page: Callable[[Page], bool],
        *,
        page_limit_reached: Callable[[], bool],
    ) -> None:
        self._scope = scope
        self._push_page = push_page
        self._page_limit_reached = page_limit_reached
        self._known = DedupFilter()

    def learn(self, page: Page) -> None:
        """Marks the links of an audited page as already known."""

        self._known.add(element_key(page.dom.url))
        for path in page.paths:
            self._known.add(element_key(path))

    def train(self, page: Page) -> bool:
        if not page.code or not page.body:
            return False
        if self._page_limit_reached() or self._scope.skip_page(page):
            return False

        new_paths = [
            path
            for path in page.paths
            if not self._scope.skip_path(path) and self._known.add(element_key(path))
        ]
        if not new_paths:
            return False

        logger.info("Trainer: %s new element(s) at %s", len(new_paths), page.dom.url)
        return self._push_page(page)

    def clear(self) -> None:
        self._known.clear()
