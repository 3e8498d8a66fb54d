"""File-system side of asset resolution.

Logical paths come in three shapes:

- ``~/scripts/app.js``: relative to the static root,
- ``/static/scripts/app.js``: already under the URL base the root is served at,
- ``https://cdn.example.com/app.js``: external, never mapped.

A :class:`Hosting` maps the first two onto files and converts them to the
root-relative URL the browser should request.
"""

from __future__ import annotations

import datetime as dt
import posixpath
from pathlib import Path
from typing import List, Protocol

from .errors import HostingUnavailableError


APP_ROOT_MARKER = "~/"


class Hosting(Protocol):
    @property
    def is_hosted(self) -> bool:
        ...

    @property
    def base_path(self) -> str:
        ...

    def map_path(self, logical_path: str) -> Path:
        ...

    def file_exists(self, physical_path: Path) -> bool:
        ...

    def last_modified_utc(self, physical_path: Path) -> dt.datetime:
        ...

    def read_lines(self, physical_path: Path) -> List[str]:
        ...

    def to_absolute(self, logical_path: str) -> str:
        ...

    def directory_of(self, logical_path: str) -> str:
        ...

    def join(self, directory: str, relative: str) -> str:
        ...


def _split_query(path: str) -> tuple[str, str]:
    bare, sep, query = path.partition("?")
    return bare, sep + query


def directory_of(logical_path: str) -> str:
    bare, _ = _split_query(logical_path)
    idx = bare.rfind("/")
    if idx == -1:
        return ""
    return bare[: idx + 1]


def join_path(directory: str, relative: str) -> str:
    if relative.startswith(APP_ROOT_MARKER) or relative.startswith("/") or "://" in relative:
        return relative
    if not directory:
        return relative
    return posixpath.normpath(posixpath.join(directory, relative))


class FileSystemHosting:
    """Serve ``static_root`` under ``base_path`` (e.g. ``/static/``)."""

    def __init__(self, static_root: Path | str, base_path: str = "/") -> None:
        self._root = Path(static_root).resolve()
        base = base_path or "/"
        if not base.startswith("/"):
            base = "/" + base
        if not base.endswith("/"):
            base = base + "/"
        self._base_path = base

    @property
    def is_hosted(self) -> bool:
        return True

    @property
    def base_path(self) -> str:
        return self._base_path

    @property
    def static_root(self) -> Path:
        return self._root

    def _relative(self, logical_path: str) -> str:
        bare, _ = _split_query(logical_path)
        if "://" in bare:
            raise HostingUnavailableError(f"external url has no physical file: {bare}")
        if bare.startswith(APP_ROOT_MARKER):
            return bare[len(APP_ROOT_MARKER):]
        if bare.startswith(self._base_path):
            return bare[len(self._base_path):]
        if bare.startswith("/"):
            raise HostingUnavailableError(f"path outside {self._base_path}: {bare}")
        return bare

    def map_path(self, logical_path: str) -> Path:
        rel = self._relative(logical_path)
        physical = (self._root / rel).resolve()
        if physical != self._root and self._root not in physical.parents:
            raise HostingUnavailableError(f"path escapes static root: {logical_path}")
        return physical

    def file_exists(self, physical_path: Path) -> bool:
        return physical_path.is_file()

    def last_modified_utc(self, physical_path: Path) -> dt.datetime:
        mtime = physical_path.stat().st_mtime
        return dt.datetime.fromtimestamp(mtime, tz=dt.timezone.utc)

    def read_lines(self, physical_path: Path) -> List[str]:
        return physical_path.read_text(encoding="utf-8").splitlines()

    def to_absolute(self, logical_path: str) -> str:
        if logical_path.startswith(APP_ROOT_MARKER):
            return self._base_path + logical_path[len(APP_ROOT_MARKER):]
        if logical_path.startswith("/") or "://" in logical_path:
            return logical_path
        return self._base_path + logical_path

    def directory_of(self, logical_path: str) -> str:
        return directory_of(logical_path)

    def join(self, directory: str, relative: str) -> str:
        return join_path(directory, relative)


class UnhostedEnvironment:
    """Stand-in used outside a serving context: every physical lookup fails."""

    def __init__(self, base_path: str = "/") -> None:
        self._base_path = base_path if base_path.endswith("/") else base_path + "/"

    @property
    def is_hosted(self) -> bool:
        return False

    @property
    def base_path(self) -> str:
        return self._base_path

    def map_path(self, logical_path: str) -> Path:
        raise HostingUnavailableError("no hosting environment is active")

    def file_exists(self, physical_path: Path) -> bool:
        return False

    def last_modified_utc(self, physical_path: Path) -> dt.datetime:
        raise HostingUnavailableError("no hosting environment is active")

    def read_lines(self, physical_path: Path) -> List[str]:
        raise HostingUnavailableError("no hosting environment is active")

    def to_absolute(self, logical_path: str) -> str:
        if logical_path.startswith(APP_ROOT_MARKER):
            return self._base_path + logical_path[len(APP_ROOT_MARKER):]
        return logical_path

    def directory_of(self, logical_path: str) -> str:
        return directory_of(logical_path)

    def join(self, directory: str, relative: str) -> str:
        return join_path(directory, relative)
