"""
Exception hierarchy for the package mirror.

Any MirrorError raised during a sync cycle aborts that cycle only; the sync
loop logs it and tries again later.
"""


class MirrorError(Exception):
    """Base class for all mirror failures."""


class ConfigError(MirrorError):
    """Invalid or incomplete startup configuration."""


class ComparatorError(MirrorError):
    """The version comparison utility could not be run or gave bad output."""


class NetworkError(MirrorError):
    """Listing releases or downloading an asset failed."""


class FilesystemError(MirrorError):
    """Reading, writing or deleting inside the repository failed."""


class IndexBuildError(MirrorError):
    """The repository database tool could not be run or exited non-zero."""


class ServeError(MirrorError):
    """The HTTP server stopped without being asked to."""
