from __future__ import annotations

import os
import sys
from collections import Counter
from pathlib import Path

import pytest

# Ensure project root is importable as a module path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bundler import metrics
from bundler.bundles import BundleResolver
from bundler.cache import ResolutionCache
from bundler.hosting import FileSystemHosting
from bundler.mode import StaticModeOracle
from bundler.rewriter import PathRewriter
from bundler.settings import reset_settings_cache
from bundler.tags import HtmlTagEmitter

# 2024-01-01T00:00:00Z and 2024-06-01T00:00:00Z
JAN_2024 = 1704067200
JUN_2024 = 1717200000


def write(root: Path, rel: str, text: str = "", mtime: int | None = None) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


class CountingHosting(FileSystemHosting):
    """FileSystemHosting that records how often each collaborator call is made."""

    def __init__(self, static_root, base_path="/static/"):
        super().__init__(static_root, base_path)
        self.calls: Counter = Counter()

    @property
    def file_io_calls(self) -> int:
        return sum(self.calls[name] for name in ("map_path", "file_exists", "last_modified_utc", "read_lines"))

    def map_path(self, logical_path):
        self.calls["map_path"] += 1
        return super().map_path(logical_path)

    def file_exists(self, physical_path):
        self.calls["file_exists"] += 1
        return super().file_exists(physical_path)

    def last_modified_utc(self, physical_path):
        self.calls["last_modified_utc"] += 1
        return super().last_modified_utc(physical_path)

    def read_lines(self, physical_path):
        self.calls["read_lines"] += 1
        return super().read_lines(physical_path)


class SwitchOracle:
    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def is_caching_enabled(self) -> bool:
        return self.enabled


@pytest.fixture(autouse=True)
def _isolate_state(monkeypatch):
    for key in ("STATIC_ROOT", "STATIC_URL_BASE", "BUNDLER_DEBUG", "BUNDLER_CACHE_MODE", "BUNDLER_DEFAULT_OPTION"):
        monkeypatch.delenv(key, raising=False)
    reset_settings_cache()
    metrics.reset_metrics()
    yield
    reset_settings_cache()


@pytest.fixture()
def static_root(tmp_path):
    """A small static tree: scripts with a minified sibling, styles, manifests."""

    root = tmp_path / "static"
    write(root, "scripts/app.js", "app()", mtime=JAN_2024)
    write(root, "scripts/app.min.js", "app()", mtime=JUN_2024)
    write(root, "scripts/vendor.js", "vendor()", mtime=JAN_2024)
    write(root, "scripts/a.js", "a()", mtime=JAN_2024)
    write(root, "scripts/b.js", "b()", mtime=JUN_2024)
    write(root, "scripts/site.js.bundle", "a.coffee\n\n  b.js  \n")
    write(root, "styles/site.css", "body{}", mtime=JAN_2024)
    write(root, "styles/site.min.css", "body{}", mtime=JAN_2024)
    write(root, "styles/theme.css", "h1{}", mtime=JUN_2024)
    write(root, "styles/site.css.bundle", "site.css\ntheme.less\n")
    write(root, "images/logo.png", "png", mtime=JAN_2024)
    return root


@pytest.fixture()
def hosting(static_root):
    return CountingHosting(static_root, "/static/")


@pytest.fixture()
def oracle():
    return SwitchOracle(True)


@pytest.fixture()
def rewriter(hosting, oracle):
    return PathRewriter(hosting, oracle, ResolutionCache("path"))


@pytest.fixture()
def resolver(rewriter, hosting, oracle):
    return BundleResolver(rewriter, hosting, oracle, HtmlTagEmitter(), ResolutionCache("bundle"))


@pytest.fixture()
def disabled_rewriter(hosting):
    return PathRewriter(hosting, StaticModeOracle(False), ResolutionCache("path"))
