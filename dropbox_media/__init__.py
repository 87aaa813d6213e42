"""Dropbox backend for a CMS media manager."""

__version__ = "0.1.0"
