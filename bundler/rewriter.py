"""Logical asset path -> browser url, with minified substitution and cache busting."""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Optional, Protocol

from .cache import ResolutionCache
from .errors import BundlerError
from .hosting import APP_ROOT_MARKER, Hosting
from .mode import ModeOracle
from .options import BundleOption


logger = logging.getLogger("bundler.rewriter")

# (source extension, minified extension)
MINIFIABLE_EXTENSIONS = ((".js", ".min.js"), (".css", ".min.css"))

TOKEN_EPOCH = dt.datetime(2001, 1, 1, tzinfo=dt.timezone.utc)
# Timestamps are counted in 100ns ticks and bucketed by 10**9 ticks (100 seconds).
_TICKS_PER_SECOND = 10_000_000
_TICKS_PER_TOKEN_UNIT = 1_000_000_000
_TOKEN_PARAM = re.compile(r"-?[0-9a-f]+")


class UrlRewriter(Protocol):
    def rewrite_url(self, path: str, option: BundleOption = BundleOption.NORMAL) -> str:
        ...


def format_token(modified_utc: dt.datetime) -> str:
    if modified_utc.tzinfo is None:
        modified_utc = modified_utc.replace(tzinfo=dt.timezone.utc)
    delta = modified_utc - TOKEN_EPOCH
    ticks = (delta.days * 86_400 + delta.seconds) * _TICKS_PER_SECOND + delta.microseconds * 10
    # truncates toward zero
    units = abs(ticks) // _TICKS_PER_TOKEN_UNIT
    return format(units if ticks >= 0 else -units, "x")


def cache_bust_token(hosting: Hosting, logical_path: str) -> str:
    """Token for ``logical_path``'s mtime, or "" when the file can't be stat'd."""

    if not hosting.is_hosted:
        return ""
    try:
        physical = hosting.map_path(logical_path)
        modified = hosting.last_modified_utc(physical)
    except (BundlerError, OSError, ValueError) as exc:
        logger.debug("No cache-bust token for %s: %s", logical_path, exc)
        return ""
    return format_token(modified)


def minified_candidate(path: str) -> Optional[str]:
    for ext, min_ext in MINIFIABLE_EXTENSIONS:
        if path.endswith(ext) and not path.endswith(min_ext):
            return path.replace(ext, min_ext, 1)
    return None


def has_token(url: str) -> bool:
    """True when the query already carries a bare hex cache-bust parameter."""

    _, sep, query = url.partition("?")
    if not sep:
        return False
    return any(_TOKEN_PARAM.fullmatch(param) for param in query.split("&"))


def append_token(url: str, token: str) -> str:
    if not token or has_token(url):
        return url
    return url + ("&" if "?" in url else "?") + token


class PathRewriter:
    """Resolves logical asset paths, memoized per logical path.

    The cache key is the logical path alone: within one caching window the
    first option a path was resolved with wins for later calls.
    """

    def __init__(
        self,
        hosting: Hosting,
        oracle: ModeOracle,
        cache: Optional[ResolutionCache[str, str]] = None,
    ) -> None:
        self.hosting = hosting
        self.oracle = oracle
        self.cache: ResolutionCache[str, str] = cache if cache is not None else ResolutionCache("path")

    def rewrite(self, path: str, option: BundleOption = BundleOption.NORMAL) -> str:
        if not self.oracle.is_caching_enabled():
            self.cache.clear()
        return self.cache.get_or_compute(path, lambda key: self._resolve(key, option))

    def rewrite_url(self, path: str, option: BundleOption = BundleOption.NORMAL) -> str:
        """Entry point for tag helpers: ``~/`` is expanded to the served base first."""

        if path.startswith(APP_ROOT_MARKER):
            path = self.hosting.base_path + path[len(APP_ROOT_MARKER):]
        return self.rewrite(path, option)

    def _resolve(self, path: str, option: BundleOption) -> str:
        working = path
        if option.minify:
            candidate = minified_candidate(path)
            if candidate and self._exists(candidate):
                working = candidate

        if "://" in working:
            return working

        url = self.hosting.to_absolute(working)
        return append_token(url, cache_bust_token(self.hosting, path))

    def _exists(self, logical_path: str) -> bool:
        if not self.hosting.is_hosted:
            return False
        try:
            return self.hosting.file_exists(self.hosting.map_path(logical_path))
        except (BundlerError, OSError, ValueError) as exc:
            logger.debug("Minified probe failed for %s: %s", logical_path, exc)
            return False
