from __future__ import annotations


class BundlerError(Exception):
    """Base class for asset resolution failures."""


class HostingUnavailableError(BundlerError):
    """Raised when a logical path cannot be mapped onto the static root."""


class ManifestNotFoundError(BundlerError, FileNotFoundError):
    def __init__(self, manifest_path: str, reason: str | None = None) -> None:
        self.manifest_path = manifest_path
        self.reason = reason
        message = f"bundle manifest not readable: {manifest_path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidBundleOption(BundlerError, ValueError):
    """Raised when a bundle option string cannot be parsed."""
