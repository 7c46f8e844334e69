"""Relational store access for the Lovii API."""

from lovii.database.db import connect, init_db, savepoint

__all__ = ["connect", "init_db", "savepoint"]
