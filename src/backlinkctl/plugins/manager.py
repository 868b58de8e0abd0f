"""Plugin discovery and loading.

Two sources, loaded in this order:

* entry points in the ``backlinkctl.plugins`` group (installed packages);
* single-file plugins in ``.backlinkctl/plugins/`` under the workspace root.

A plugin is any object with ``@hookimpl`` methods. Classes are instantiated
with no arguments before registration. A plugin that fails to import or
construct is logged and left out; it never stops the command.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType

import pluggy

from backlinkctl.plugins.hookspecs import BacklinkctlHookSpec

PROJECT_NAME = "backlinkctl"
ENTRY_POINT_GROUP = "backlinkctl.plugins"
LOCAL_PLUGIN_DIR = Path(".backlinkctl") / "plugins"
LOCAL_MODULE_PREFIX = "backlinkctl_local_plugin_"

logger = logging.getLogger(__name__)


def _has_hook_impls(cls: type) -> bool:
    marker = f"{PROJECT_NAME}_impl"
    return any(
        callable(getattr(cls, name, None)) and getattr(getattr(cls, name), marker, None)
        for name in dir(cls)
        if not name.startswith("_")
    )


def _instantiate(cls: type, name: str) -> object | None:
    try:
        return cls()
    except Exception:
        logger.warning("Plugin %s could not be constructed", name, exc_info=True)
        return None


def _import_file(path: Path) -> ModuleType | None:
    """Import *path* as ``backlinkctl_local_plugin_<stem>``; ``None`` on failure."""
    module_name = LOCAL_MODULE_PREFIX + path.stem
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        logger.warning("Not an importable plugin file: %s", path)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        logger.warning("Local plugin %s failed to import", path, exc_info=True)
        return None
    return module


class PluginManager:
    """Owns the pluggy manager and the backlink hook specs."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(BacklinkctlHookSpec)
        self._loaded = False

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load both plugin sources and return the registered names."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_entry_point_classes()
        if local_dir is not None:
            self._load_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register an already constructed plugin under *name* (class name by default)."""
        name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=name)
        logger.debug("Registered plugin %s", name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def _instantiate_entry_point_classes(self) -> None:
        # Entry points may name a class; pluggy registers the class object itself.
        for plugin in self.get_plugins():
            if not (inspect.isclass(plugin) and _has_hook_impls(plugin)):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            instance = _instantiate(plugin, name)
            if instance is not None:
                self.register_plugin(instance, name=name)

    def _load_local(self, local_dir: Path) -> None:
        if not local_dir.is_dir():
            return
        for path in sorted(local_dir.glob("*.py")):
            if path.name.startswith("_"):
                continue
            module = _import_file(path)
            if module is None:
                continue
            for _, cls in inspect.getmembers(module, inspect.isclass):
                if cls.__module__ != module.__name__ or not _has_hook_impls(cls):
                    continue
                name = f"{module.__name__}.{cls.__name__}"
                instance = _instantiate(cls, name)
                if instance is not None:
                    self.register_plugin(instance, name=name)
