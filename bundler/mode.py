from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from .logging_utils import get_request_id

if TYPE_CHECKING:
    from .settings import BundlerSettings


logger = logging.getLogger("bundler.mode")


class ModeOracle(Protocol):
    def is_caching_enabled(self) -> bool:
        ...


class HostedModeOracle:
    """Cache only while a request is being served and debugging is off.

    Outside a request (scripts, tests, startup) there is no context to ask, so
    the answer is "debugging", i.e. caching disabled.
    """

    def __init__(self, debug: bool = False) -> None:
        self._debug = debug

    def is_caching_enabled(self) -> bool:
        if get_request_id() is None:
            return False
        return not self._debug


class StaticModeOracle:
    def __init__(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

    def is_caching_enabled(self) -> bool:
        return self._enabled


def oracle_from_settings(settings: "BundlerSettings") -> ModeOracle:
    mode = settings.cache_mode
    if mode == "on":
        return StaticModeOracle(True)
    if mode == "off":
        return StaticModeOracle(False)
    logger.debug("Caching follows request context (debug=%s)", settings.debug)
    return HostedModeOracle(debug=settings.debug)
