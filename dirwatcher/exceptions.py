"""Exception types raised by DirWatcher."""


class DirwatcherError(Exception):
    """Base class for DirWatcher errors."""


class ConfigError(DirwatcherError):
    """Raised when the configuration is invalid."""


class WatchRootError(DirwatcherError):
    """Raised when the watch root cannot be watched."""
