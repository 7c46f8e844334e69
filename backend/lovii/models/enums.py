"""
Enum definitions for the Lovii API.
"""
from enum import Enum


class NoteType(str, Enum):
    """What a note's ``content`` holds."""
    TEXT = "text"
    DRAWING = "drawing"
    COLLAGE = "collage"


class OutboxMethod(str, Enum):
    """HTTP verbs the sync client queues for delivery."""
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
