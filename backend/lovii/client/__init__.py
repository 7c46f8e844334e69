"""Device-side sync client for the Lovii API."""

from lovii.client.api import LoviiApiClient
from lovii.client.errors import ApiError, NotFoundError, TransientNetworkError, is_transient
from lovii.client.local_store import KEYS, LocalStore
from lovii.client.outbox import Outbox, OutboxWorker
from lovii.client.subscription import PartnerNoteSubscription
from lovii.client.sync import SyncClient, merge_notes
from lovii.client.widget_bridge import WidgetBridge

__all__ = [
    "LoviiApiClient",
    "ApiError", "NotFoundError", "TransientNetworkError", "is_transient",
    "KEYS", "LocalStore",
    "Outbox", "OutboxWorker",
    "PartnerNoteSubscription",
    "SyncClient", "merge_notes",
    "WidgetBridge",
]
