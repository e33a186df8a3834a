"""Cooperative pause/resume shared by the spider and the audit loop."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PauseToken:
    """Opaque handle for one ``pause()`` call."""

    id: int
    holder: str = ""


class PauseController:
    """Tracks outstanding pause holds; the scan is paused while any is held.

    Pausing is observed only at checkpoints (``wait_if_paused``), so in-flight
    requests, browser jobs and the running check always finish first.
    """

    def __init__(self) -> None:
        self._tokens: list[PauseToken] = []
        self._ids = itertools.count(1)
        self._condition = threading.Condition()

    @property
    def paused(self) -> bool:
        with self._condition:
            return bool(self._tokens)

    def pause(self, holder: str = "") -> PauseToken:
        with self._condition:
            token = PauseToken(id=next(self._ids), holder=holder)
            self._tokens.append(token)
            return token

    def resume(self, token: Optional[PauseToken] = None) -> bool:
        """Releases ``token``, or the most recent hold when omitted."""

        with self._condition:
            if token is None:
                if not self._tokens:
                    return False
                self._tokens.pop()
            elif token in self._tokens:
                self._tokens.remove(token)
            else:
                return False

            if not self._tokens:
                self._condition.notify_all()
            return True

    def wait_if_paused(self, timeout: Optional[float] = None) -> bool:
        """Blocks while paused; ``False`` if ``timeout`` expired first."""

        with self._condition:
            return self._condition.wait_for(lambda: not self._tokens, timeout)

    def clear(self) -> None:
        with self._condition:
            self._tokens.clear()
            self._condition.notify_all()
