class FilterError(Exception):
    """Base class for every failure that ends a filtering run."""


class UsageError(FilterError):
    pass


class ConfigError(FilterError):
    pass


class LoadError(FilterError):
    pass


class WriteError(FilterError):
    pass


class CollectiveError(FilterError):
    """A peer process vanished or sent data that does not fit the image."""
