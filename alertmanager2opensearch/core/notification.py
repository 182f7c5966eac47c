from datetime import datetime, timezone

from pydantic import ValidationError

from alertmanager2opensearch.core.errors import DecodeError, UnsupportedVersionError
from alertmanager2opensearch.core.schemas import SUPPORTED_WEBHOOK_VERSION, Notification


def format_timestamp(when: datetime) -> str:
    """RFC3339 in UTC with microseconds, e.g. 2024-03-15T10:00:00.000000Z."""
    return when.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_notification(raw: bytes, now: datetime) -> Notification:
    """Decode a webhook body and stamp it with the receipt time.

    Raises DecodeError for empty or malformed payloads and
    UnsupportedVersionError when the webhook version is not exactly "4".
    """
    if not raw:
        raise DecodeError("empty payload")

    try:
        msg = Notification.model_validate_json(raw)
    except ValidationError as e:
        raise DecodeError(f"failed to unmarshal: {e}") from e

    if msg.version != SUPPORTED_WEBHOOK_VERSION:
        raise UnsupportedVersionError(msg.version, SUPPORTED_WEBHOOK_VERSION)

    return msg.model_copy(update={"timestamp": format_timestamp(now)})
