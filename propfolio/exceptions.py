"""Custom exception hierarchy for propfolio."""


class PropfolioError(Exception):
    """Base exception for all propfolio errors."""


class EntityNotFoundError(PropfolioError):
    """Raised when a referenced entity does not exist."""


class InvalidEntityStateError(PropfolioError):
    """Raised when an entity is in an invalid state for the operation."""


class InvalidPatchError(PropfolioError):
    """Raised when a draft or patch names fields that cannot be set."""


class PersistenceError(PropfolioError):
    """Raised when a persistence backend round trip fails."""


class ReconciliationError(PropfolioError):
    """Raised when the placeholder reconciliation could not complete.

    ``deleted`` and ``inserted`` hold the ids that were committed before
    the failure, for manual follow-up.
    """

    def __init__(
        self,
        message: str,
        deleted: list[str] | None = None,
        inserted: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.deleted = deleted or []
        self.inserted = inserted or []


class UnknownPaletteError(PropfolioError):
    """Raised when a palette id is not in the catalog."""


class IdentityError(PropfolioError):
    """Classified identity failure carrying a human-readable message."""

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class BackupError(PropfolioError):
    """Raised when a backup file cannot be written or read."""


class ConfigurationError(PropfolioError):
    """Raised when configuration is invalid or missing."""
