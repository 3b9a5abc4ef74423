"""Error taxonomy shared by the record store and the services built on it.

Every failure returns control to the caller; none of these is fatal to the
process. The HTTP layer maps each class to a status code in ``main.py``.
"""


class ProntuarioError(Exception):
    """Base class for all domain errors."""

    pass


class ValidationError(ProntuarioError):
    """Raised when a required field is missing.

    Nothing is persisted; the caller should re-prompt.
    """

    pass


class NotFoundError(ProntuarioError):
    """Raised when an explicit lookup references a key that does not exist."""

    pass


class StorageUnavailableError(ProntuarioError):
    """Raised when the database could not be opened or a write not committed."""

    pass


class InvalidBackupError(ProntuarioError):
    """Raised when an import payload does not have the backup shape.

    Raised before the store is wiped, so existing data is untouched.
    """

    pass


class AccessDeniedError(ProntuarioError):
    """Raised when the PIN gate denies a destructive action."""

    pass
