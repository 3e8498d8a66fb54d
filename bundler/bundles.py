"""Bundle manifests: text files listing the sources of one logical asset.

``~/scripts/app.js.bundle``::

    jquery.js
    app.coffee
    widgets/menu.js

Rendered either as one tag for the pre-combined ``app.js`` / ``app.min.js``
or as one tag per listed file, in manifest order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from markupsafe import Markup

from .cache import ResolutionCache
from .errors import BundlerError, ManifestNotFoundError
from .hosting import Hosting
from .mode import ModeOracle
from .options import BundleOption
from .rewriter import UrlRewriter
from .tags import TagEmitter


logger = logging.getLogger("bundler.bundles")

BUNDLE_SUFFIX = ".bundle"


@dataclass(frozen=True)
class AssetKind:
    name: str
    tag: str
    extension: str
    min_extension: str
    # compile-to sources listed in manifests, served as their compiled output
    preprocessed: Tuple[str, ...]

    @property
    def bundle_suffix(self) -> str:
        return self.extension + BUNDLE_SUFFIX

    def compiled_name(self, entry: str) -> str:
        for ext in self.preprocessed:
            if entry.endswith(ext):
                return entry[: -len(ext)] + self.extension
        return entry

    def combined_path(self, manifest_path: str, option: BundleOption) -> str:
        if option is BundleOption.MINIFIED_AND_COMBINED and manifest_path.endswith(self.bundle_suffix):
            return manifest_path[: -len(self.bundle_suffix)] + self.min_extension
        if manifest_path.endswith(BUNDLE_SUFFIX):
            return manifest_path[: -len(BUNDLE_SUFFIX)]
        return manifest_path


SCRIPTS = AssetKind("scripts", "script", ".js", ".min.js", (".coffee",))
STYLES = AssetKind("styles", "link", ".css", ".min.css", (".less", ".scss", ".sass"))


def manifest_entries(lines: Iterable[str], kind: AssetKind) -> List[str]:
    """Non-blank manifest lines, trimmed, with compile-to extensions swapped."""

    return [kind.compiled_name(line.strip()) for line in lines if line.strip()]


def kind_for_manifest(manifest_path: str) -> Optional[AssetKind]:
    for kind in (SCRIPTS, STYLES):
        if manifest_path.endswith(kind.bundle_suffix):
            return kind
    return None


class BundleResolver:
    def __init__(
        self,
        rewriter: UrlRewriter,
        hosting: Hosting,
        oracle: ModeOracle,
        emitter: TagEmitter,
        cache: Optional[ResolutionCache[str, Markup]] = None,
    ) -> None:
        self.rewriter = rewriter
        self.hosting = hosting
        self.oracle = oracle
        self.emitter = emitter
        self.cache: ResolutionCache[str, Markup] = cache if cache is not None else ResolutionCache("bundle")

    def render_script(self, src: Optional[str], option: BundleOption = BundleOption.MINIFIED) -> Markup:
        if not src:
            return Markup("")
        return self.emitter.emit("script", self.rewriter.rewrite_url(src, option))

    def render_stylesheet(
        self,
        href: Optional[str],
        media: Optional[str] = None,
        option: BundleOption = BundleOption.MINIFIED,
    ) -> Markup:
        if not href:
            return Markup("")
        attrs = {"rel": "stylesheet"}
        if media is not None:
            attrs["media"] = media
        return self.emitter.emit("link", self.rewriter.rewrite_url(href, option), attrs)

    def render_js_bundle(self, manifest_path: Optional[str], option: BundleOption = BundleOption.MINIFIED) -> Markup:
        if not manifest_path:
            return Markup("")
        return self._cached(manifest_path, lambda key: self._expand(key, option, SCRIPTS, None))

    def render_css_bundle(
        self,
        manifest_path: Optional[str],
        option: BundleOption = BundleOption.MINIFIED,
        media: Optional[str] = None,
    ) -> Markup:
        if not manifest_path:
            return Markup("")
        return self._cached(manifest_path, lambda key: self._expand(key, option, STYLES, media))

    def bundle_path(
        self,
        manifest_path: Optional[str],
        option: BundleOption = BundleOption.MINIFIED_AND_COMBINED,
    ) -> str:
        """Url of the pre-combined file; empty unless ``option`` combines."""

        if not manifest_path or not option.combine:
            return ""
        combined = manifest_path[: -len(BUNDLE_SUFFIX)] if manifest_path.endswith(BUNDLE_SUFFIX) else manifest_path
        return self.rewriter.rewrite_url(combined, option)

    def _cached(self, manifest_path: str, compute) -> Markup:
        if not self.oracle.is_caching_enabled():
            self.cache.clear()
        return self.cache.get_or_compute(manifest_path, compute)

    def _render(self, kind: AssetKind, src: str, option: BundleOption, media: Optional[str]) -> Markup:
        if kind is STYLES:
            return self.render_stylesheet(src, media, option)
        return self.render_script(src, option)

    def _expand(self, manifest_path: str, option: BundleOption, kind: AssetKind, media: Optional[str]) -> Markup:
        if option.combine:
            return self._render(kind, kind.combined_path(manifest_path, option), option, media)

        base_dir = self.hosting.directory_of(manifest_path)
        rendered = [
            self._render(kind, self.hosting.join(base_dir, entry), option, media)
            for entry in manifest_entries(self._read_manifest(manifest_path), kind)
        ]
        return Markup("".join(f"{tag}\n" for tag in rendered))

    def _read_manifest(self, manifest_path: str) -> List[str]:
        try:
            physical = self.hosting.map_path(manifest_path)
            return self.hosting.read_lines(physical)
        except (BundlerError, OSError, ValueError) as exc:
            logger.warning(
                "Bundle manifest unreadable: %s (%s)",
                manifest_path,
                exc,
                extra={"manifest": manifest_path},
            )
            raise ManifestNotFoundError(manifest_path, str(exc)) from exc
