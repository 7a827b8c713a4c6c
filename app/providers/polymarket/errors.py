"""Errors raised by the Polymarket upstream clients."""

from typing import Optional


class UpstreamError(Exception):
    """Network failure or non-2xx response from a Polymarket service."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        provider: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.provider = provider

    def __str__(self) -> str:
        if self.provider:
            return f"{self.provider}: {self.message}"
        return self.message

