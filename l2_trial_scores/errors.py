class SnapshotError(Exception):
    """Base class for every failure that aborts a run."""


class ConfigError(SnapshotError):
    """A required invocation parameter or deployment entry is missing."""


class StorageError(SnapshotError, OSError):
    """The checkpoint (or deployment) file exists but cannot be read or parsed."""


class NetworkError(SnapshotError):
    """An RPC, log fetch or contract call failed."""


class DataError(SnapshotError):
    """An event payload or contract result is malformed."""
