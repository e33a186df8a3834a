"""Loads a page in a browser and reports every DOM state reachable by one event."""

from __future__ import annotations

from typing import Iterable, Tuple

from ...core.models import Page, Transition
from ..job import Job, JobResult


def state_key(url: str, transitions: Iterable[Transition]) -> Tuple[str, Tuple[Transition, ...]]:
    return (url, tuple(transitions))


def _unchanged(before: Page, after: Page) -> bool:
    return before.body == after.body and before.dom.url == after.dom.url


class ResourceExploration(Job):
    """Explores ``resource``: its rendered state plus one level of transitions.

    States are replayed from ``dom.root_url``, the URL the browser originally
    loaded, since a transition may have moved ``dom.url`` elsewhere.
    """

    @property
    def resource(self) -> Page:
        return self.options["resource"]

    def run(self) -> None:
        browser = self.browser
        assert browser is not None

        resource = self.resource
        root_url = resource.dom.root_url
        transitions = list(resource.dom.transitions)
        cluster = browser.cluster

        if not cluster.claim_exploration(state_key(root_url, transitions)):
            return

        rendered = browser.load(root_url, transitions)
        if rendered is None:
            return
        # The base state only counts when rendering changed what was fetched.
        if not _unchanged(resource, rendered) and cluster.claim_capture(state_key(root_url, transitions)):
            self.save_result(JobResult(job=self, page=rendered))

        for transition in browser.event_candidates():
            next_transitions = transitions + [transition]
            if not cluster.claim_capture(state_key(root_url, next_transitions)):
                continue

            page = browser.load(root_url, next_transitions)
            if page is None or _unchanged(rendered, page):
                continue
            self.save_result(JobResult(job=self, page=page))
