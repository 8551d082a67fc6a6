# site_snapshot/__init__.py
"""
SiteSnapshot package initializer.
Defines package version; the CLI lives in :mod:`site_snapshot.cli`.
"""
__version__ = "0.1.0"
