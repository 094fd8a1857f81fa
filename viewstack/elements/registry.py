"""
Element registry - YAML view definitions on disk, built on demand through the factory.

Layout under each definition path:

    views/
      pages/profile.yaml     -> ("pages", "profile")
      fields/search.yml      -> ("fields", "search")
      footer.yaml            -> ("root", "footer")
"""

from __future__ import annotations

import copy
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import yaml
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..core.config import RegistryConfig
from ..core.exceptions import InvalidElementError
from .element import Element
from .factory import ElementFactory

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
ROOT_KIND = "root"

Key = tuple[str, str]


def is_definition_file(path: Any) -> bool:
    return str(path).endswith(YAML_SUFFIXES)


class DefinitionChangeHandler(FileSystemEventHandler):
    """Routes watchdog events for definition files to the registry."""

    def __init__(self, registry: "ElementRegistry"):
        self.registry = registry

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if event.event_type in ("created", "modified") and is_definition_file(event.src_path):
            self.registry.reload(event.src_path)
        elif event.event_type == "deleted" and is_definition_file(event.src_path):
            self.registry.discard(event.src_path)
        elif event.event_type == "moved":
            if is_definition_file(event.src_path):
                self.registry.discard(event.src_path)
            if is_definition_file(event.dest_path):
                self.registry.reload(event.dest_path)


class ElementRegistry:
    """
    Definitions keyed by (kind, name), loaded from YAML and kept fresh by watchdog.

    Usage:
        registry = ElementRegistry(["views"])
        registry.load_all()
        profile = registry.build("pages", "profile").prepare()
    """

    def __init__(
        self,
        paths: Optional[list[str]] = None,
        factory: Optional[ElementFactory] = None,
    ):
        # Resolved so watchdog's absolute event paths compare equal
        self.paths = [Path(p).resolve() for p in (paths or [])]
        self.factory = factory or ElementFactory()
        self._definitions: dict[Key, dict] = {}
        self._lock = threading.RLock()
        self._listeners: list[Callable[[str, str], None]] = []
        self._observer: Optional[Observer] = None

    @classmethod
    def from_config(
        cls, config: RegistryConfig, factory: Optional[ElementFactory] = None
    ) -> "ElementRegistry":
        """Create and load a registry from a RegistryConfig, watching if enabled."""
        registry = cls(config.paths, factory)
        registry.load_all()
        if config.watch:
            registry.start_watching()
        return registry

    # -- loading --------------------------------------------------------------

    def load_all(self) -> None:
        """Drop everything and load every definition file under the configured paths."""
        found: dict[Key, dict] = {}
        for base_path in self.paths:
            if not base_path.exists():
                logger.warning("Definition path %s does not exist", base_path)
                continue
            files = sorted(p for p in base_path.rglob("*") if is_definition_file(p))
            for file_path in files:
                data = self._read(file_path)
                if data is not None:
                    found[self._locate(file_path)] = data
        with self._lock:
            self._definitions = found
        logger.debug("Loaded %d definitions", len(found))

    @staticmethod
    def _read(file_path: Path) -> Optional[dict]:
        try:
            data = yaml.safe_load(file_path.read_text())
        except (yaml.YAMLError, OSError) as e:
            logger.warning("Failed to load %s: %s", file_path, e)
            return None
        if data is None:
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: definition must be a mapping", file_path)
            return None
        return data

    def _locate(self, file_path: Path) -> Key:
        """Map a file to (kind, name): first directory below its base path, or root."""
        for base_path in self.paths:
            if file_path.is_relative_to(base_path):
                parts = file_path.relative_to(base_path).parts
                kind = parts[0] if len(parts) > 1 else ROOT_KIND
                return kind, file_path.stem
        return file_path.parent.name, file_path.stem

    # -- lookup ---------------------------------------------------------------

    def get(self, kind: str, name: str) -> Optional[dict]:
        """Raw definition, or None."""
        with self._lock:
            return self._definitions.get((kind, name))

    def get_all(self, kind: str) -> dict[str, dict]:
        with self._lock:
            return {n: d for (k, n), d in self._definitions.items() if k == kind}

    def list_kinds(self) -> list[str]:
        with self._lock:
            return list(dict.fromkeys(k for k, _ in self._definitions))

    def list_names(self, kind: str) -> list[str]:
        return list(self.get_all(kind))

    def __contains__(self, key: Key) -> bool:
        with self._lock:
            return tuple(key) in self._definitions

    def build(
        self, kind: str, name: str, flags: Optional[Mapping[str, Any]] = None
    ) -> Element:
        """
        Build a fresh element from a registered definition.

        Each call returns a new instance; the stored definition is never
        handed to the factory. A definition without a name is named after
        its file, and flags["name"] overrides both.

        Raises:
            InvalidElementError: If the definition is unknown
        """
        definition = self.get(kind, name)
        if definition is None:
            raise InvalidElementError(f"No definition {kind}/{name} in registry")

        config = copy.deepcopy(definition)
        override = (flags or {}).get("name")
        if override:
            config["name"] = override
        elif not config.get("name"):
            config["name"] = name
        return self.factory.create(config)

    # -- hot reload -----------------------------------------------------------

    def reload(self, file_path: str) -> None:
        """Re-read one definition file and notify listeners."""
        path = Path(file_path).resolve()
        key = self._locate(path)
        data = self._read(path)
        if data is None:
            return
        with self._lock:
            self._definitions[key] = data
        self._notify(*key)

    def discard(self, file_path: str) -> None:
        """Forget the definition of a deleted file and notify listeners."""
        key = self._locate(Path(file_path).resolve())
        with self._lock:
            removed = self._definitions.pop(key, None)
        if removed is not None:
            self._notify(*key)

    def on_change(self, callback: Callable[[str, str], None]) -> None:
        """Register callback(kind, name), called after a definition changes or disappears."""
        self._listeners.append(callback)

    def _notify(self, kind: str, name: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(kind, name)
            except Exception:
                logger.exception("Listener error on %s/%s", kind, name)

    def start_watching(self) -> None:
        """Watch every existing definition path with one observer. Idempotent."""
        if self._observer is not None:
            return
        observer = Observer()
        handler = DefinitionChangeHandler(self)
        watched = [p for p in self.paths if p.exists()]
        for base_path in watched:
            observer.schedule(handler, str(base_path), recursive=True)
        observer.start()
        self._observer = observer
        logger.info("Watching %d definition paths", len(watched))

    def stop_watching(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None

    @property
    def watching(self) -> bool:
        return self._observer is not None
