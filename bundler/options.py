from __future__ import annotations

from enum import Enum

from .errors import InvalidBundleOption


class BundleOption(str, Enum):
    NORMAL = "normal"
    MINIFIED = "minified"
    COMBINED = "combined"
    MINIFIED_AND_COMBINED = "minified_and_combined"

    @property
    def minify(self) -> bool:
        return self in (BundleOption.MINIFIED, BundleOption.MINIFIED_AND_COMBINED)

    @property
    def combine(self) -> bool:
        return self in (BundleOption.COMBINED, BundleOption.MINIFIED_AND_COMBINED)

    @classmethod
    def parse(cls, value: "BundleOption | str | None", default: "BundleOption | None" = None) -> "BundleOption":
        """Accept enum members, names or values ("MinifiedAndCombined", "minified-and-combined")."""

        if isinstance(value, cls):
            return value
        if value is None or str(value).strip() == "":
            if default is None:
                raise InvalidBundleOption("bundle option is required")
            return default
        raw = str(value).strip()
        key = raw.lower().replace("-", "_").replace(" ", "_")
        for member in cls:
            if key == member.value or key == member.value.replace("_", ""):
                return member
        raise InvalidBundleOption(f"unknown bundle option: {raw!r}")
