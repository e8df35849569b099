"""Catalogs backed by Python source files on disk."""

from __future__ import annotations

import asyncio
import logging
import sys
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable

from nef_core.api.abc import Catalog
from nef_core.config import DEFAULT_PATTERNS
from nef_core.errors import InvalidCatalogInputError

from .loading import load_module
from .simple import classes_from_namespace

_logger = logging.getLogger(__name__)


def _resolve(path: Path | str, cwd: Path | str | None) -> Path:
    candidate = Path(path)
    if not candidate.is_absolute():
        base = Path(cwd) if cwd is not None and str(cwd).strip() else Path.cwd()
        candidate = base.absolute() / candidate
    return candidate.resolve()


def _normalize_patterns(patterns: Iterable[str] | str | None) -> tuple[str, ...]:
    if patterns is None:
        return ()
    if isinstance(patterns, str):
        patterns = [patterns]
    return tuple(str(item).strip() for item in patterns if item and str(item).strip())


class FileCatalog(Catalog):
    """Catalog over the ``__all__`` classes of a single source file."""

    def __init__(self, file: Path | str, *, cwd: Path | str | None = None) -> None:
        if not str(file).strip():
            raise InvalidCatalogInputError("FileCatalog requires a file path")
        self.file = _resolve(file, cwd)

    def list_classes_sync(self) -> list[type]:
        return classes_from_namespace(load_module(self.file))

    def __repr__(self) -> str:
        return f"FileCatalog({str(self.file)!r})"


class DirectoryCatalog(Catalog):
    """Catalog scanning a directory for source files matching glob patterns.

    Files are loaded in sorted path order. ``exclude`` patterns are matched
    with ``fnmatch`` against the path relative to the directory and against
    the bare file name.
    """

    def __init__(
        self,
        directory: Path | str,
        *,
        patterns: Iterable[str] | str | None = None,
        exclude: Iterable[str] | str | None = None,
        cwd: Path | str | None = None,
    ) -> None:
        if not str(directory).strip():
            raise InvalidCatalogInputError("DirectoryCatalog requires a directory path")
        self.directory = _resolve(directory, cwd)
        self.patterns = _normalize_patterns(patterns) or DEFAULT_PATTERNS
        self.exclude = _normalize_patterns(exclude)

    def matching_files(self) -> list[Path]:
        if not self.directory.is_dir():
            _logger.debug("%s is not a directory, nothing to scan", self.directory)
            return []

        found: set[Path] = set()
        for pattern in self.patterns:
            for path in self.directory.glob(pattern):
                if path.is_file() and not self._is_excluded(path):
                    found.add(path.resolve())
        return sorted(found)

    def _is_excluded(self, path: Path) -> bool:
        relative = path.relative_to(self.directory).as_posix()
        return any(
            fnmatch(relative, pattern) or fnmatch(path.name, pattern)
            for pattern in self.exclude
        )

    def list_classes_sync(self) -> list[type]:
        classes: list[type] = []
        for path in self.matching_files():
            classes.extend(classes_from_namespace(load_module(path)))
        _logger.debug("%r yielded %d class(es)", self, len(classes))
        return classes

    async def list_classes(self) -> list[type]:
        return await asyncio.to_thread(self.list_classes_sync)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.directory)!r})"


class ApplicationCatalog(DirectoryCatalog):
    """Directory catalog rooted next to the application's entry script.

    The entry script is ``__main__``'s file unless ``main_file`` is given. It
    is always excluded so scanning never executes the program a second time.
    """

    def __init__(
        self,
        *,
        patterns: Iterable[str] | str | None = None,
        exclude: Iterable[str] | str | None = None,
        main_file: Path | str | None = None,
    ) -> None:
        entry = main_file if main_file is not None else _main_file()
        if entry is None or not str(entry).strip():
            raise InvalidCatalogInputError(
                "ApplicationCatalog cannot determine the application entry script"
            )
        self.main_file = _resolve(entry, None)
        normalized = _normalize_patterns(patterns) or (f"*{self.main_file.suffix}",)
        super().__init__(
            self.main_file.parent,
            patterns=normalized,
            exclude=exclude,
        )

    def _is_excluded(self, path: Path) -> bool:
        return path.resolve() == self.main_file or super()._is_excluded(path)


def _main_file() -> str | None:
    main = sys.modules.get("__main__")
    return getattr(main, "__file__", None)
