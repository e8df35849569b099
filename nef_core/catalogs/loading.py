"""Import Python source files for filesystem catalogs."""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import re
import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from types import ModuleType
from typing import Iterator

from nef_core.errors import CatalogLoadError

_logger = logging.getLogger(__name__)

MODULE_PREFIX = "_nef_catalog"

# guards sys.modules and sys.path for the whole import of a catalog file
_import_lock = threading.RLock()


def module_name_for(path: Path) -> str:
    """Stable synthetic module name for ``path``; equal paths map to equal names."""

    resolved = path.resolve()
    digest = hashlib.sha1(str(resolved).encode("utf-8")).hexdigest()[:12]
    stem = re.sub(r"\W", "_", resolved.stem) or "module"
    return f"{MODULE_PREFIX}_{stem}_{digest}"


@contextmanager
def _insert_sys_path(directory: Path) -> Iterator[Path]:
    path = str(directory)
    already_present = path in sys.path
    if not already_present:
        sys.path.insert(0, path)
    try:
        yield directory
    finally:
        if not already_present and path in sys.path:
            sys.path.remove(path)


def load_module(path: Path) -> ModuleType:
    """Import ``path`` once and return the cached module on later calls.

    Callers arriving while another thread imports the same file wait for
    that import to finish instead of seeing a partially executed module.
    """

    path = path.resolve()
    with _import_lock:
        return _load_locked(path, module_name_for(path))


def _load_locked(path: Path, module_name: str) -> ModuleType:
    cached = sys.modules.get(module_name)
    if cached is not None:
        return cached

    if not path.is_file():
        raise CatalogLoadError(path, "not a file")
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise CatalogLoadError(path, "not an importable Python source file")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    _logger.debug("loading %s as %s", path, module_name)
    try:
        with _insert_sys_path(path.parent):
            spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise CatalogLoadError(path, f"import failed: {exc}") from exc
    return module
