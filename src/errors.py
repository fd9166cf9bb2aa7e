"""Exception hierarchy shared by the paste pipeline and the page service."""

from __future__ import annotations

from enum import Enum


class PasteShareError(Exception):
    """Base class for all errors raised by this package."""


class RelocationReason(str, Enum):
    UNSUPPORTED = "unsupported"
    TRANSPORT = "transport"


class RelocationFailure(PasteShareError):
    """An image source could not be rehosted. The original source stays."""

    def __init__(self, reason: RelocationReason, detail: str = "") -> None:
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)
        self.reason = reason
        self.detail = detail


class ValidationError(PasteShareError):
    """Rejected input, e.g. publishing an empty document."""


class PageNotFound(PasteShareError):
    """No page with this id was ever created (or it has been reclaimed)."""


class PageExpired(PasteShareError):
    """The page exists but its time-to-live has elapsed."""


class TransportError(PasteShareError):
    """A request to the backend failed; the caller may retry explicitly."""


class StoreUnavailable(PasteShareError):
    """The page store could not be reached."""
