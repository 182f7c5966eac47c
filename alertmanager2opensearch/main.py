from typing import Optional

from fastapi import FastAPI

from alertmanager2opensearch.api.webhooks import router as webhook_router
from alertmanager2opensearch.config import Settings
from alertmanager2opensearch.core.ingestion import IngestionService
from alertmanager2opensearch.core.metrics import OutcomeCounters
from alertmanager2opensearch.storage.opensearch_store import NotificationStore

__version__ = "0.1.0"


def create_app(
    settings: Settings,
    store: NotificationStore,
    counters: Optional[OutcomeCounters] = None,
) -> FastAPI:
    app = FastAPI(title="alertmanager2opensearch", version=__version__)
    app.state.counters = counters if counters is not None else OutcomeCounters()
    app.state.ingestion = IngestionService(store, settings.opensearch.index)
    app.include_router(webhook_router)
    return app
