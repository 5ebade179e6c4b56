"""Exceptions raised by the loader, the data store and the upstream client."""

from __future__ import annotations

from typing import Optional


class FinanceDataError(Exception):
    """Base exception for the finance data service."""


class InvalidArgumentError(FinanceDataError, ValueError):
    """Raised on programming or configuration errors (absent dataset, zero rate, empty seed)."""


class FetchFailure(FinanceDataError):
    """Raised when one upstream read fails: transport, HTTP status, size or decoding."""

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.resource_type = resource_type
        self.status_code = status_code


class DeadlineExceeded(FinanceDataError):
    """Recorded for a fetch still outstanding when the load deadline elapsed."""


class LoadCancelled(FinanceDataError):
    """Recorded for a fetch still outstanding when the loader was stopped."""
