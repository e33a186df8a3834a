"""Runs plugins on background threads and collects their results."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Type

from ..core.component import ComponentManager
from .base import Plugin

if TYPE_CHECKING:  # pragma: no cover - import-time type checking only
    from ..engine.orchestrator import ScanOrchestrator

logger = logging.getLogger(__name__)


class PluginManager(ComponentManager[Plugin]):
    kind = "Plugin"
    entry_point_group = "webaudit.plugins"

    def __init__(
        self,
        framework: "ScanOrchestrator",
        builtins: Optional[Dict[str, Type[Plugin]]] = None,
        options: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> None:
        if builtins is None:
            from . import BUILTIN_PLUGINS

            builtins = BUILTIN_PLUGINS
        super().__init__(builtins)
        self.framework = framework
        self.options = dict(options or {})
        self._threads: List[threading.Thread] = []
        self._instances: Dict[str, Plugin] = {}

    def run(self) -> None:
        for name, plugin_class in self.items():
            plugin = plugin_class(self.framework, self.options.get(name))
            self._instances[name] = plugin
            thread = threading.Thread(
                target=self._run_plugin,
                args=(name, plugin),
                name=f"plugin-{name}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()

    def block(self, timeout: Optional[float] = None) -> None:
        """Waits for every running plugin to finish."""

        for thread in self._threads:
            thread.join(timeout)
        self._threads = [thread for thread in self._threads if thread.is_alive()]

    def busy(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    def results(self) -> Dict[str, Any]:
        return {
            name: plugin.result
            for name, plugin in self._instances.items()
            if plugin.result is not None
        }

    def clear(self) -> None:
        super().clear()
        self._instances.clear()
        self._threads.clear()

    @staticmethod
    def _run_plugin(name: str, plugin: Plugin) -> None:
        try:
            plugin.prepare()
            plugin.run()
            plugin.clean_up()
        except Exception:
            logger.exception("Plugin '%s' failed", name)
