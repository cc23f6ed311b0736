from pathlib import Path


class MockServerError(Exception):
    """Base class for startup errors. Nothing here is raised while serving."""


class ConfigError(MockServerError):
    pass


class DataFileError(MockServerError):
    def __init__(self, message: str, path: Path | str | None = None):
        self.path = path
        super().__init__(message)


class EmptySnapshotSequenceError(DataFileError):
    def __init__(self, path: Path | str | None = None):
        where = f" in {path}" if path else ""
        super().__init__(f"no snapshots{where}: at least one snapshot is required", path)
