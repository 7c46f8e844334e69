"""Lovii: couples' note sharing API and device sync client."""

__version__ = "1.0.0"
