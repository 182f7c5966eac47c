from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response
from loguru import logger
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect

from alertmanager2opensearch.core.errors import (
    BodyReadError,
    ClientInputError,
    EmptyBodyError,
    StoreWriteError,
)
from alertmanager2opensearch.core.ingestion import IngestionService
from alertmanager2opensearch.core.metrics import OutcomeCounters

router = APIRouter()


async def read_body(req: Request) -> bytes:
    try:
        return await req.body()
    except ClientDisconnect as e:
        raise BodyReadError(f"client disconnected while reading body: {e}") from e


def _reject(counters: OutcomeCounters, status_code: int, message: str) -> PlainTextResponse:
    counters.invalid.inc()
    return PlainTextResponse(message + "\n", status_code=status_code)


@router.post("/webhook")
async def alertmanager_webhook(req: Request):
    counters: OutcomeCounters = req.app.state.counters
    service: IngestionService = req.app.state.ingestion

    counters.received.inc()

    try:
        body = await read_body(req)
    except BodyReadError as e:
        logger.error(str(e))
        return _reject(counters, 500, str(e))

    if not body:
        err = EmptyBodyError()
        logger.error(str(err))
        return _reject(counters, 400, str(err))

    try:
        index, msg = await run_in_threadpool(service.ingest, body)
    except ClientInputError as e:
        logger.error(str(e))
        return _reject(counters, 400, str(e))
    except StoreWriteError as e:
        # the store's diagnostic stays in the log
        logger.error(f"unable to insert document in opensearch: {e}")
        return _reject(counters, 400, "unable to insert document in opensearch")

    logger.debug(f"received and stored alert in {index}: {msg.common_labels}")
    counters.successful.inc()
    return PlainTextResponse("")


@router.get("/healthz")
def healthz():
    return PlainTextResponse("Ok")


@router.get("/metrics")
def metrics(req: Request):
    counters: OutcomeCounters = req.app.state.counters
    return Response(counters.exposition(), media_type=CONTENT_TYPE_LATEST)
