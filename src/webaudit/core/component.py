"""Name-based registry shared by checks, reports and plugins."""

from __future__ import annotations

import inspect
import logging
from importlib.metadata import entry_points
from typing import Any, ClassVar, Dict, Generic, Iterable, Iterator, List, Mapping, Optional, Type, TypeVar

from .errors import ComponentNotFoundError

logger = logging.getLogger(__name__)


class Component:
    """Base for every pluggable component."""

    name: ClassVar[str] = ""
    info: ClassVar[Dict[str, Any]] = {}

    @classmethod
    def describe(cls) -> Dict[str, Any]:
        details = dict(cls.info)
        details.setdefault("name", cls.name)
        details.setdefault("description", (inspect.getdoc(cls) or "").strip())
        authors = details.get("author", [])
        if isinstance(authors, str):
            authors = [authors]
        details["author"] = [author.strip() for author in authors]
        return details


C = TypeVar("C", bound=Component)


class ComponentManager(Generic[C]):
    """Maps component names to classes and tracks which ones are loaded.

    Built-ins are registered by the subclass; third parties can add their own
    through the ``entry_point_group`` entry point group.
    """

    kind: ClassVar[str] = "Component"
    entry_point_group: ClassVar[Optional[str]] = None

    def __init__(self, builtins: Optional[Mapping[str, Type[C]]] = None) -> None:
        self._registry: Dict[str, Type[C]] = dict(builtins or {})
        self._registry.update(self._discover())
        self._loaded: Dict[str, Type[C]] = {}

    def register(self, component: Type[C], name: Optional[str] = None) -> None:
        self._registry[name or component.name] = component

    def available(self) -> List[str]:
        return sorted(self._registry)

    @property
    def loaded(self) -> List[str]:
        return list(self._loaded)

    def load(self, names: Iterable[str]) -> List[str]:
        """Loads ``names``; ``"*"`` loads everything available."""

        for name in names:
            if name == "*":
                for available in self.available():
                    self._loaded.setdefault(available, self._registry[available])
                continue
            self[name]
        return self.loaded

    def __getitem__(self, name: str) -> Type[C]:
        name = str(name)
        if name in self._loaded:
            return self._loaded[name]
        if name not in self._registry:
            raise ComponentNotFoundError(f"{self.kind} '{name}' could not be found.")
        self._loaded[name] = self._registry[name]
        return self._loaded[name]

    def __contains__(self, name: object) -> bool:
        return name in self._loaded

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._loaded))

    def __len__(self) -> int:
        return len(self._loaded)

    def empty(self) -> bool:
        return not self._loaded

    def items(self) -> List[tuple[str, Type[C]]]:
        return list(self._loaded.items())

    def clear(self) -> None:
        self._loaded.clear()

    def name_to_path(self, name: str) -> str:
        if name not in self._registry:
            raise ComponentNotFoundError(f"{self.kind} '{name}' could not be found.")
        return inspect.getfile(self._registry[name])

    def info(self, name: str) -> Dict[str, Any]:
        if name not in self._registry:
            raise ComponentNotFoundError(f"{self.kind} '{name}' could not be found.")
        return self._registry[name].describe()

    def _discover(self) -> Dict[str, Type[C]]:
        if not self.entry_point_group:
            return {}

        discovered: Dict[str, Type[C]] = {}
        for entry_point in entry_points(group=self.entry_point_group):
            try:
                discovered[entry_point.name] = entry_point.load()
            except Exception:
                logger.warning("Could not load %s '%s'", self.kind.lower(), entry_point.name, exc_info=True)
        return discovered
