"""
Exceptions raised by the catalogue package.

Routes translate these into HTTP errors; everything else in the package
either handles them locally (the repository's fallback path) or lets
them propagate to the caller.
"""


class CatalogError(Exception):
    """Base class for catalogue errors."""


class RecordStoreError(CatalogError):
    """The backing record store could not serve a request."""


class AuthenticationRequired(CatalogError):
    """An action needs a signed-in user."""

    def __init__(self, message: str = "Please sign in to submit a resource") -> None:
        super().__init__(message)


class DirectoryError(CatalogError):
    """A directory form failed validation."""


class DirectoryNotFound(CatalogError):
    """No directory exists with the requested id."""
