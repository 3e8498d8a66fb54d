from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, TypeVar, Union

from jinja2 import Environment
from markupsafe import Markup

from .bundles import BundleResolver
from .cache import ResolutionCache
from .hosting import FileSystemHosting, Hosting, UnhostedEnvironment
from .mode import ModeOracle, oracle_from_settings
from .options import BundleOption
from .rewriter import PathRewriter
from .settings import BundlerSettings, get_settings
from .tags import HtmlTagEmitter, TagEmitter


logger = logging.getLogger("bundler.templating")

T = TypeVar("T")
OptionLike = Union[BundleOption, str, None]


class AssetHelpers:
    """View-facing helpers: one call per tag, bundles expanded on demand."""

    def __init__(
        self,
        rewriter: PathRewriter,
        resolver: BundleResolver,
        emitter: TagEmitter,
        default_option: BundleOption = BundleOption.MINIFIED,
    ) -> None:
        self.rewriter = rewriter
        self.resolver = resolver
        self.emitter = emitter
        self.default_option = default_option

    def _option(self, option: OptionLike, fallback: Optional[BundleOption] = None) -> BundleOption:
        return BundleOption.parse(option, default=fallback or self.default_option)

    @property
    def caching_enabled(self) -> bool:
        return self.resolver.oracle.is_caching_enabled()

    def js(self, src: Optional[str], option: OptionLike = None) -> Markup:
        return self.resolver.render_script(src, self._option(option))

    def css(self, href: Optional[str], media: Optional[str] = None, option: OptionLike = None) -> Markup:
        return self.resolver.render_stylesheet(href, media, self._option(option))

    def link(
        self,
        rel: str,
        href: Optional[str],
        attrs: Optional[Mapping[str, Any]] = None,
        option: OptionLike = BundleOption.NORMAL,
    ) -> Markup:
        if not href:
            return Markup("")
        url = self.rewriter.rewrite_url(href, self._option(option, BundleOption.NORMAL))
        return self.emitter.emit("link", url, {"rel": rel, **dict(attrs or {})})

    def img(
        self,
        src: Optional[str],
        alt: str = "",
        link: Optional[str] = None,
        attrs: Optional[Mapping[str, Any]] = None,
    ) -> Markup:
        if not src:
            return Markup("")
        url = self.rewriter.rewrite_url(src, BundleOption.NORMAL)
        return self.emitter.emit("img", url, {"alt": alt, "link": link, **dict(attrs or {})})

    def js_bundle(self, manifest_path: Optional[str], option: OptionLike = None) -> Markup:
        return self.resolver.render_js_bundle(manifest_path, self._option(option))

    def css_bundle(
        self,
        manifest_path: Optional[str],
        option: OptionLike = None,
        media: Optional[str] = None,
    ) -> Markup:
        return self.resolver.render_css_bundle(manifest_path, self._option(option), media)

    def bundle_path(self, manifest_path: Optional[str], option: OptionLike = BundleOption.MINIFIED_AND_COMBINED) -> str:
        return self.resolver.bundle_path(manifest_path, self._option(option, BundleOption.MINIFIED_AND_COMBINED))

    @staticmethod
    def js_bool(value: Any) -> str:
        return "true" if value else "false"

    @staticmethod
    def pick(predicate: Any, when_true: T, when_false: T) -> T:
        return when_true if predicate else when_false

    def install(self, env: Environment) -> Environment:
        env.globals.update(
            {
                "js": self.js,
                "css": self.css,
                "link": self.link,
                "img": self.img,
                "js_bundle": self.js_bundle,
                "css_bundle": self.css_bundle,
                "bundle_path": self.bundle_path,
                "pick": self.pick,
                "BundleOption": BundleOption,
            }
        )
        env.filters["js_bool"] = self.js_bool
        return env


def build_hosting(settings: BundlerSettings) -> Hosting:
    if settings.static_root is None:
        logger.info("STATIC_ROOT not set; asset lookups will not hit the file system")
        return UnhostedEnvironment(settings.static_url_base)
    return FileSystemHosting(settings.static_root, settings.static_url_base)


def build_engine(
    settings: Optional[BundlerSettings] = None,
    hosting: Optional[Hosting] = None,
    oracle: Optional[ModeOracle] = None,
    emitter: Optional[TagEmitter] = None,
) -> AssetHelpers:
    """Wire hosting, mode oracle, both caches and the tag emitter together."""

    settings = settings or get_settings()
    hosting = hosting or build_hosting(settings)
    oracle = oracle or oracle_from_settings(settings)
    emitter = emitter or HtmlTagEmitter()
    rewriter = PathRewriter(hosting, oracle, ResolutionCache("path"))
    resolver = BundleResolver(rewriter, hosting, oracle, emitter, ResolutionCache("bundle"))
    return AssetHelpers(rewriter, resolver, emitter, default_option=settings.default_option)
