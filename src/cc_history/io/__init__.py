"""Filesystem-facing helpers: paths, settings, logging."""
