"""
DirWatcher: A top-level directory change watcher.

Provides both a CLI and library API for watching a directory tree and
reporting when its top-level subdirectories are created, removed or moved.
"""

__version__ = "0.1.0"
