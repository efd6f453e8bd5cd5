"""MediaVault: local-first media library with git-backed sync."""

__version__ = "0.1.0"
