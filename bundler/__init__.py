"""Asset url resolution, cache busting and bundle manifest expansion for server-rendered views."""

from .bundles import SCRIPTS, STYLES, AssetKind, BundleResolver, manifest_entries
from .cache import ResolutionCache
from .errors import BundlerError, HostingUnavailableError, InvalidBundleOption, ManifestNotFoundError
from .hosting import FileSystemHosting, Hosting, UnhostedEnvironment
from .mode import HostedModeOracle, ModeOracle, StaticModeOracle, oracle_from_settings
from .options import BundleOption
from .rewriter import PathRewriter, cache_bust_token, format_token
from .settings import BundlerSettings, get_settings, reset_settings_cache
from .tags import HtmlTagEmitter, TagEmitter
from .templating import AssetHelpers, build_engine

__all__ = [
    "AssetHelpers",
    "AssetKind",
    "BundleOption",
    "BundleResolver",
    "BundlerError",
    "BundlerSettings",
    "FileSystemHosting",
    "HostedModeOracle",
    "Hosting",
    "HostingUnavailableError",
    "HtmlTagEmitter",
    "InvalidBundleOption",
    "ManifestNotFoundError",
    "ModeOracle",
    "PathRewriter",
    "ResolutionCache",
    "SCRIPTS",
    "STYLES",
    "StaticModeOracle",
    "TagEmitter",
    "UnhostedEnvironment",
    "build_engine",
    "cache_bust_token",
    "format_token",
    "get_settings",
    "manifest_entries",
    "oracle_from_settings",
    "reset_settings_cache",
]
