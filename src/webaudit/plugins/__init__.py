"""Built-in plugins."""

from .base import Plugin
from .healthmap import Healthmap
from .manager import PluginManager

BUILTIN_PLUGINS = {plugin.name: plugin for plugin in (Healthmap,)}

__all__ = ["BUILTIN_PLUGINS", "Healthmap", "Plugin", "PluginManager"]
