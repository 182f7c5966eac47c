from datetime import datetime, timezone
from typing import Callable, Tuple

from alertmanager2opensearch.core.index_name import build_index_name
from alertmanager2opensearch.core.notification import parse_notification
from alertmanager2opensearch.core.schemas import Notification
from alertmanager2opensearch.storage.opensearch_store import NotificationStore


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IngestionService:
    def __init__(
        self,
        store: NotificationStore,
        index_template: str,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.index_template = index_template
        self.clock = clock

    def ingest(self, body: bytes) -> Tuple[str, Notification]:
        """Validate one webhook body and write it to the current index.

        One write per call, no retry: the sender redelivers on failure.
        """
        now = self.clock()
        msg = parse_notification(body, now)

        # same instant for @timestamp and the index placeholders
        index = build_index_name(self.index_template, now)
        self.store.index_document(index, msg.to_document())
        return index, msg
