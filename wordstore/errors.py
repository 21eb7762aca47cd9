"""
Store errors

A single error kind covers every fault of the durable medium.
Duplicate words are not an error: they are absorbed by insert.
"""

from __future__ import annotations


class StorageFailure(Exception):
    """Raised when the database cannot be opened, read or written."""
