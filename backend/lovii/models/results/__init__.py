"""Result models for API handlers and client flows."""

from lovii.models.results.api import (
    ApiResult, ConnectResult, BulkReplaceResult, AuthResult, Deleted,
)
from lovii.models.results.client import (
    ClientResult, AuthOutcome, ConnectOutcome, WidgetSendOutcome, FlushResult,
)

__all__ = [
    "ApiResult", "ConnectResult", "BulkReplaceResult", "AuthResult", "Deleted",
    "ClientResult", "AuthOutcome", "ConnectOutcome", "WidgetSendOutcome", "FlushResult",
]
