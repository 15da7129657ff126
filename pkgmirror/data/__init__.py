"""
Local repository state and the sync loop that maintains it.

This package is responsible for:
* Creating the repository directory layout at startup.
* Listing the package files currently on disk.
* Reconciling them against the newest GitHub release, forever.
"""
