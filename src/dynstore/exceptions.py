"""Error kinds raised by the storage estimation pipeline."""


class StorageError(Exception):
    """Base class for all pipeline errors."""


class DataGapError(StorageError):
    """A resampling interval has no underlying discharge observations."""


class PreconditionError(StorageError):
    """A stage was called before its input windows are fully defined."""


class DomainError(StorageError):
    """A log or square root was requested for a non-positive quantity."""


class InsufficientDataError(StorageError):
    """Too few recession samples, groups or bins to continue."""
