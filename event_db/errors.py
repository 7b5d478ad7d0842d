from typing import Any, Optional


class SchemaInitError(Exception):
    """Base class for every failure of a schema run."""


class DatabaseConnectionError(SchemaInitError, ConnectionError):
    """The database could not be reached. Re-running the whole script is safe."""


class DatabasePermissionError(SchemaInitError, PermissionError):
    """The connected user may not create collections or indexes."""


class SchemaConflictError(SchemaInitError):
    """An existing collection or index disagrees with the desired definition.

    The existing entity is left untouched; an operator has to decide whether
    to drop it.
    """

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        index_name: Optional[str] = None,
        expected: Optional[Any] = None,
        found: Optional[Any] = None,
    ):
        super().__init__(message)
        self.collection = collection
        self.index_name = index_name
        self.expected = expected
        self.found = found
