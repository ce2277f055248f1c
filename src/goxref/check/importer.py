"""Source importer: loads imported packages from Go source trees.

Packages are located under GOPATH-style roots (``<root>/src/<path>`` first,
then ``<root>/<path>``), parsed, checked and cached. The cache is shared by
every run that uses the same importer and is safe to use from several
threads. Relative import paths are canonicalized against the importing
directory and cached under the canonical path only, so ``./foo`` and the
``foo`` it resolves to yield the same package object while ``./foo`` from
another directory does not.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Sequence
from pathlib import Path

import structlog

from goxref.check.checker import Checker
from goxref.check.objects import Package
from goxref.check.universe import UNSAFE
from goxref.core.errors import ImportFailure
from goxref.syntax.parser import GoParser

log = structlog.get_logger(__name__)


def go_env_paths() -> list[str]:
    """Search roots from $GOPATH entries followed by $GOROOT."""
    roots: list[str] = []
    gopath = os.environ.get("GOPATH", "")
    roots.extend(p for p in gopath.split(os.pathsep) if p)
    goroot = os.environ.get("GOROOT", "")
    if goroot:
        roots.append(goroot)
    return roots


class SourceImporter:
    """Imports packages by parsing and checking their source.

    Args:
        search_paths: Roots searched in order.
        use_go_env: Append $GOPATH entries and $GOROOT to ``search_paths``.
        include_tests: Also load ``*_test.go`` files of imported packages.
        parser: Parser to use; a fresh ``GoParser`` by default.
    """

    def __init__(
        self,
        search_paths: Sequence[str | Path] = (),
        *,
        use_go_env: bool = True,
        include_tests: bool = False,
        parser: GoParser | None = None,
    ) -> None:
        self.search_paths = [str(Path(p).expanduser()) for p in search_paths]
        if use_go_env:
            self.search_paths.extend(p for p in go_env_paths() if p not in self.search_paths)
        self.include_tests = include_tests
        self.parser = parser or GoParser()
        self._lock = threading.RLock()
        self._cache: dict[str, Package] = {}
        self._loading: set[str] = set()

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return path in self._cache

    def cached(self) -> dict[str, Package]:
        """Snapshot of the cache, keyed by every path a package is known by."""
        with self._lock:
            return dict(self._cache)

    def canonical_path(self, path: str, src_dir: str | None = None) -> tuple[str, Path | None]:
        """Canonical import path of ``path`` and, if known, its directory.

        Relative paths (``./x``, ``../x``) are resolved against ``src_dir``
        or the working directory. A directory that lies under a search
        root's ``src`` maps back to its import path there.
        """
        if not _is_relative(path):
            return os.path.normpath(path).replace(os.sep, "/"), None
        base = Path(src_dir) if src_dir else Path.cwd()
        directory = Path(os.path.normpath(base / path))
        return self.import_path_for(directory) or directory.as_posix(), directory

    def import_path_for(self, directory: str | Path) -> str | None:
        """Import path of a directory lying under a search root's ``src``."""
        directory = Path(directory).resolve()
        for root in self.search_paths:
            src = Path(root).resolve() / "src"
            try:
                rel = directory.relative_to(src)
            except ValueError:
                continue
            if rel.parts:
                return rel.as_posix()
        return None

    def find_dir(self, path: str) -> Path:
        """Directory holding the package ``path``."""
        searched: list[str] = []
        for root in self.search_paths:
            for candidate in (Path(root) / "src" / path, Path(root) / path):
                searched.append(str(candidate))
                if candidate.is_dir():
                    return candidate
        raise ImportFailure.not_found(path, searched)

    def import_package(self, path: str, src_dir: str | None = None) -> Package:
        """Load, check and cache the package at import path ``path``.

        Raises:
            ImportFailure: The package cannot be found, has no Go files, or
                imports itself through a cycle.
        """
        if path == "unsafe":
            return UNSAFE
        # Relative spellings depend on src_dir; they are cached by canonical path only.
        relative = _is_relative(path)
        with self._lock:
            if not relative and (pkg := self._cache.get(path)) is not None:
                return pkg
            canonical, directory = self.canonical_path(path, src_dir)
            pkg = self._cache.get(canonical)
            if pkg is None:
                if canonical in self._loading:
                    raise ImportFailure.cycle(canonical)
                self._loading.add(canonical)
                try:
                    pkg = self._load(canonical, directory)
                finally:
                    self._loading.discard(canonical)
                self._cache[canonical] = pkg
            if not relative:
                self._cache[path] = pkg
            return pkg

    def _load(self, path: str, directory: Path | None) -> Package:
        directory = directory if directory is not None else self.find_dir(path)
        parsed = self.parser.parse_dir(directory, include_tests=self.include_tests)
        if not parsed:
            raise ImportFailure.no_package(path, str(directory))
        name = _pick_package(parsed)
        if len(parsed) > 1:
            log.warning(
                "import.multiple_packages",
                path=path,
                directory=str(directory),
                packages=sorted(parsed),
                chosen=name,
            )
        checker = Checker(importer=self)
        pkg, errors = checker.check(path, parsed[name], src_dir=str(directory))
        for err in errors:
            log.debug("import.check_error", path=path, error=str(err))
        log.debug("import.loaded", path=path, files=len(parsed[name]), errors=len(errors))
        return pkg


def _pick_package(parsed: dict[str, list]) -> str:
    for name in sorted(parsed):
        if not name.endswith("_test"):
            return name
    return sorted(parsed)[0]


def _is_relative(path: str) -> bool:
    return path in (".", "..") or path.startswith(("./", "../"))
