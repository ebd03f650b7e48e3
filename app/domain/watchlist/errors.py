from __future__ import annotations


class WatchlistError(Exception):
    """Base error for watchlist operations."""

    code = "WATCHLIST_ERROR"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidFormatError(WatchlistError):
    """Raised when a symbol is not 1-5 uppercase letters after normalization."""

    code = "INVALID_FORMAT"


class SymbolNotFoundError(WatchlistError):
    """Raised when the quote provider has no tradable price for a valid symbol."""

    code = "SYMBOL_NOT_FOUND"


class AlreadyExistsError(WatchlistError):
    """Raised when re-adding a symbol while price enrichment is disabled."""

    code = "ALREADY_EXISTS"


class UpstreamUnavailableError(WatchlistError):
    """Raised when the quote provider failed; safe to retry later."""

    code = "UPSTREAM_UNAVAILABLE"


class EntryNotFoundError(WatchlistError):
    """Raised when removing a symbol that is not in the watchlist."""

    code = "NOT_FOUND"


class StoreUnavailableError(WatchlistError):
    """Raised when the watchlist store cannot be reached."""

    code = "STORE_UNAVAILABLE"


class DuplicateKeyError(WatchlistError):
    """Raised by the repository when an insert hits the unique symbol constraint."""

    code = "DUPLICATE_KEY"


class QuoteProviderError(Exception):
    """Raised by quote clients on network failure, timeout or a malformed response."""
