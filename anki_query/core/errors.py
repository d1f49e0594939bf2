# Path: anki_query/core/errors.py
__all__ = ["AnkiQueryError", "UsageError", "NotFoundError", "StorageError"]


class AnkiQueryError(Exception):
    """Base class for errors reported to the user by the CLI."""
    pass


class UsageError(AnkiQueryError):
    """Unknown command, missing argument or invalid option value."""
    pass


class NotFoundError(AnkiQueryError):
    """A referenced note type, deck or profile does not exist in the collection."""

    def __init__(self, kind: str, name: str, hint: str = ""):
        self.kind = kind
        self.name = name
        message = f"{kind} '{name}' not found"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)


class StorageError(AnkiQueryError):
    """The collection file cannot be opened."""
    pass
