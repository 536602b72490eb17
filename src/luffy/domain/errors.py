"""Error taxonomy for the resolution pipeline."""

from __future__ import annotations


class LuffyError(Exception):
    """Base class for all resolution errors.

    ``stage`` names the pipeline stage the error surfaced in.  Providers
    usually leave it unset; the resolution use case fills it in before
    the error reaches the caller.
    """

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        message = super().__str__()
        if self.stage:
            return f"[{self.stage}] {message}"
        return message


class NotFoundError(LuffyError):
    """Raised when a search yields no results."""


class ParseError(LuffyError):
    """Raised when expected structure is absent after all fallbacks."""


class UpstreamError(LuffyError):
    """Raised on non-2xx responses, transport failures and undecodable bodies."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message, stage=stage)
        self.status_code = status_code


class UpstreamTimeoutError(UpstreamError):
    """Raised when an outbound call exceeds its deadline."""


class DecodeError(LuffyError):
    """Raised by strict decoders.  The identifier codec never lets it escape."""


class ExtractionError(LuffyError):
    """Raised when no extractor can turn an embed URL into a manifest URL."""


class ProviderNotFoundError(LuffyError):
    """Raised when a provider name is not known to the registry."""
