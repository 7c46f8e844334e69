"""Persist the latest note where the home-screen widget reads it."""

from typing import Any

from lovii.client.local_store import KEYS, LocalStore
from lovii.logging import get_logger
from lovii.models import Note

logger = get_logger('client.widget_bridge')

DEFAULT_WIDGET_COLOR = "#FFFFFF"


class WidgetBridge:
    def __init__(self, store: LocalStore):
        self.store = store

    async def update_widget_data(self, note: Note) -> bool:
        widget_data = {
            "type": note.type.value,
            "content": note.content,
            "timestamp": note.timestamp,
            "color": note.color or DEFAULT_WIDGET_COLOR,
            "images": note.images or [],
        }
        try:
            await self.store.set_json(KEYS["WIDGET_DATA"], widget_data)
        except Exception as e:
            # A failed widget write never fails the caller.
            logger.warning(f"Widget data update failed: {e}")
            return False
        return True

    async def read_widget_data(self) -> dict[str, Any] | None:
        return await self.store.get_json(KEYS["WIDGET_DATA"])
