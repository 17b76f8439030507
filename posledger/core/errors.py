class DatabaseNotOpenError(RuntimeError):
    """Raised when a Database handle is used before open() or after close()."""


class MigrationError(RuntimeError):
    """Startup must abort: a migration is missing or one of its statements failed."""

    def __init__(self, version: int, message: str):
        self.version = version
        super().__init__(f"Migration to version {version} failed: {message}")
