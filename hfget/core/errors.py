# hfget/core/errors.py
"""
Error taxonomy shared by the core and the UI.

Step-local failures are raised as one of these and caught at the step
boundary in ui.py, which asks core.flow where to go next.
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional, Union


class HfgetError(Exception):
    """Base error; keeps the underlying cause for display."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(message)

    def __str__(self) -> str:
        if self.original_error is not None:
            return f"{self.message} (Original: {self.original_error})"
        return self.message


class NotFoundError(HfgetError):
    """No search results, no weight files, or an unknown repository."""


class AuthMissingError(HfgetError):
    """No token could be resolved from the settings file or environment."""


class TransportError(HfgetError):
    """Network failure while searching, listing, or downloading."""


class FilesystemError(HfgetError):
    """Directory creation, file deletion, or file write failed."""


class SettingsWriteError(FilesystemError):
    def __init__(self, path: Union[str, Path], original_error: Optional[BaseException] = None):
        self.path = Path(path)
        super().__init__(f"Failed to save config to {self.path}", original_error)


class AlreadyExistsError(HfgetError):
    """Settings init against an existing file."""


class UserCancelled(HfgetError):
    """Explicit cancel-all or an interrupt during the download step."""


__all__ = [
    "HfgetError",
    "NotFoundError",
    "AuthMissingError",
    "TransportError",
    "FilesystemError",
    "SettingsWriteError",
    "AlreadyExistsError",
    "UserCancelled",
]
