"""
pkgmirror - mirror pacman packages from GitHub releases.

The newest release of a GitHub repository is polled periodically; its
`*.pkg.tar.zst` assets are downloaded into a local repository directory,
superseded builds are deleted, and the directory is served over HTTP.
"""

__version__ = "0.1.0"
