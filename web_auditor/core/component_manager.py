"""Registries of named component factories.

Check modules, plugins and reports are all components: classes exposing
``info()`` metadata, registered under a short name from one of three sources
(explicit registration, a directory scan, or a ``name: "pkg.mod:Class"``
manifest) and loaded, enabled or disabled by name.
"""

import copy
import importlib
import importlib.util
import inspect
import logging
import re
import threading
from abc import ABC
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Type

from .exceptions import ComponentLoadError, ComponentNotFoundError


class Component(ABC):
    """Base for every registrable component."""

    # Overridden by subclasses; merged over the defaults in info()
    INFO: Dict[str, Any] = {}

    @classmethod
    def info(cls) -> Dict[str, Any]:
        doc = inspect.getdoc(cls) or ''
        data = {
            'name': cls.__name__,
            'description': doc.splitlines()[0] if doc else '',
            'author': [],
            'version': '0.1',
            'priority': 0,
        }
        data.update(copy.deepcopy(cls.INFO))
        return data


@dataclass
class ComponentSource:
    """Where a named component comes from."""
    name: str
    path: str
    loader: Callable[[], Type[Component]]


class ComponentManager:
    """Registry of one kind of component.

    ``available()`` lists every registered name; ``loaded`` lists the names
    enabled for the current scan, in load order.
    """

    kind = 'component'
    base_class: Type[Component] = Component

    def __init__(self):
        self.logger = logging.getLogger(f'web_auditor.components.{self.kind}')
        self._lock = threading.RLock()
        self._sources: Dict[str, ComponentSource] = {}
        self._loaded: Dict[str, Type[Component]] = {}

    # Sources

    def register(self, name: str, factory: Type[Component],
                 path: Optional[str] = None) -> None:
        """Register a component class under ``name``."""
        if not (inspect.isclass(factory) and issubclass(factory, self.base_class)):
            raise ComponentLoadError(
                self.kind, name, f"{factory!r} is not a {self.base_class.__name__}"
            )

        path = path or f"{factory.__module__}:{factory.__qualname__}"
        with self._lock:
            self._sources[name] = ComponentSource(name, path, lambda: factory)

    def register_manifest(self, manifest: Dict[str, str]) -> None:
        """Register lazily imported components from ``name: "pkg.mod:Class"``."""
        for name, target in manifest.items():
            with self._lock:
                self._sources[name] = ComponentSource(
                    name, target, self._manifest_loader(name, target)
                )

    def discover(self, directory: str) -> List[str]:
        """Register every ``*.py`` file in ``directory`` under its file stem.

        Files starting with an underscore are skipped. Nothing is imported
        until the component is loaded.

        Returns:
            Names registered by this scan
        """
        root = Path(directory)
        if not root.is_dir():
            raise ComponentLoadError(self.kind, str(root), "not a directory")

        names = []
        for file_path in sorted(root.glob('*.py')):
            if file_path.name.startswith('_'):
                continue
            name = file_path.stem
            with self._lock:
                self._sources[name] = ComponentSource(
                    name, str(file_path), self._file_loader(name, file_path)
                )
            names.append(name)

        self.logger.debug(f"Discovered {len(names)} {self.kind} in {root}")
        return names

    def configure(self, section: Optional[Dict[str, Any]]) -> None:
        """Register sources from a ``components.<kind>`` config section."""
        section = section or {}
        if section.get('directory'):
            self.discover(section['directory'])
        if section.get('manifest'):
            self.register_manifest(section['manifest'])

    def _manifest_loader(self, name: str, target: str) -> Callable[[], Type[Component]]:
        def load() -> Type[Component]:
            module_name, _, attr = target.partition(':')
            try:
                module = importlib.import_module(module_name)
                factory = getattr(module, attr)
            except (ImportError, AttributeError) as e:
                raise ComponentLoadError(self.kind, target, str(e)) from e
            return factory
        return load

    def _file_loader(self, name: str, file_path: Path) -> Callable[[], Type[Component]]:
        def load() -> Type[Component]:
            module_name = f"web_auditor_{self.kind}_{name}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, file_path)
                module = importlib.util.module_from_spec(spec)
                spec.loader.exec_module(module)
            except Exception as e:
                raise ComponentLoadError(self.kind, str(file_path), str(e)) from e

            for _, obj in inspect.getmembers(module, inspect.isclass):
                if (issubclass(obj, self.base_class) and obj.__module__ == module.__name__
                        and not inspect.isabstract(obj)):
                    return obj

            raise ComponentLoadError(
                self.kind, str(file_path), f"no {self.base_class.__name__} subclass found"
            )
        return load

    # Lookup

    def available(self) -> List[str]:
        with self._lock:
            return sorted(self._sources)

    def name_to_path(self, name: str) -> str:
        with self._lock:
            if name not in self._sources:
                raise ComponentNotFoundError(self.kind, name)
            return self._sources[name].path

    def info(self, name: str) -> Dict[str, Any]:
        return self[name].info()

    # Loading

    def load(self, names: Iterable[str]) -> List[str]:
        """Load components by name.

        ``*`` selects everything available and ``-name`` excludes a name
        from the selection.

        Returns:
            Names that were loaded by this call
        """
        names = list(names)
        excluded = {n[1:] for n in names if n.startswith('-')}
        selected: List[str] = []
        for name in names:
            if name.startswith('-'):
                continue
            if name == '*':
                selected.extend(self.available())
            else:
                selected.append(name)

        loaded = []
        for name in selected:
            if name in excluded or name in loaded:
                continue
            self._load_one(name)
            loaded.append(name)

        return loaded

    def _load_one(self, name: str) -> Type[Component]:
        with self._lock:
            if name in self._loaded:
                return self._loaded[name]
            if name not in self._sources:
                raise ComponentNotFoundError(self.kind, name)
            source = self._sources[name]

        factory = source.loader()
        if not (inspect.isclass(factory) and issubclass(factory, self.base_class)):
            raise ComponentLoadError(
                self.kind, source.path, f"{factory!r} is not a {self.base_class.__name__}"
            )
        with self._lock:
            self._loaded[name] = factory
        self.logger.debug(f"Loaded {self.kind[:-1]} {name}")
        return factory

    @property
    def loaded(self) -> List[str]:
        with self._lock:
            return list(self._loaded)

    def keys(self) -> List[str]:
        return self.loaded

    def values(self) -> List[Type[Component]]:
        with self._lock:
            return list(self._loaded.values())

    def items(self):
        with self._lock:
            return list(self._loaded.items())

    def __getitem__(self, name: str) -> Type[Component]:
        return self._load_one(name)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._loaded

    def __len__(self) -> int:
        with self._lock:
            return len(self._loaded)

    def empty(self) -> bool:
        return len(self) == 0

    # Listing

    def listing(self, filters: Optional[List[str]] = None,
                name_key: str = 'name') -> List[Dict[str, Any]]:
        """Describe every available component whose path matches all ``filters``.

        Components are loaded to read their info; the previously loaded set is
        restored afterwards, even if loading one of them fails.

        Args:
            filters: Regular expressions, each of which must match the path
            name_key: Key under which the registry name is reported

        Returns:
            One info dictionary per matching component
        """
        filters = filters or []
        previously_loaded = self.loaded
        self.clear()
        try:
            listing = []
            for name in self.available():
                path = self.name_to_path(name)
                if not all(re.search(pattern, path) for pattern in filters):
                    continue

                info = self[name].info()
                authors = info.get('author') or []
                if isinstance(authors, str):
                    authors = [authors]

                info.update({
                    name_key: name,
                    'author': [author.strip() for author in authors],
                    'path': path.strip()
                })
                listing.append(info)
            return listing
        finally:
            self.clear()
            self.load(previously_loaded)

    def clear(self) -> None:
        """Unload every component; registered sources stay available."""
        with self._lock:
            self._loaded.clear()
