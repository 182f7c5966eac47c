import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from loguru import logger
from opensearchpy import OpenSearch, RequestsHttpConnection
from opensearchpy.exceptions import OpenSearchException

from alertmanager2opensearch.config import DEFAULT_MAX_RETRIES, OpenSearchConfig
from alertmanager2opensearch.core.errors import StoreUnavailableError, StoreWriteError


class NotificationStore:
    """Long-lived handle to OpenSearch shared by every request.

    Created once by connect_opensearch and never mutated afterwards; the
    underlying client is safe to use from several threads.
    """

    def __init__(self, client: OpenSearch):
        self._client = client

    def index_document(self, index: str, body: str) -> Dict[str, Any]:
        try:
            return self._client.index(index=index, body=body)
        except OpenSearchException as e:
            raise StoreWriteError(f"index {index}: {e}") from e


@dataclass(frozen=True)
class ConnectResult:
    store: Optional[NotificationStore] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.store is not None


def new_client(config: OpenSearchConfig) -> OpenSearch:
    http_auth = None
    if config.username:
        password = config.password.get_secret_value() if config.password else ""
        http_auth = (config.username, password)

    # requests honours HTTP_PROXY / HTTPS_PROXY / NO_PROXY from the environment
    return OpenSearch(
        hosts=list(config.addresses),
        http_auth=http_auth,
        connection_class=RequestsHttpConnection,
        verify_certs=config.verify_certs,
        timeout=config.timeout,
    )


def connect_opensearch(
    config: OpenSearchConfig,
    max_retries: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
    client_factory: Callable[[OpenSearchConfig], OpenSearch] = new_client,
) -> ConnectResult:
    """Build a client and wait until OpenSearch answers a cat/indices probe.

    Attempts 0..max_retries are made, sleeping 2**attempt seconds after each
    failure. The caller decides what to do with a failed result.
    """
    if not max_retries:
        max_retries = config.max_retries or DEFAULT_MAX_RETRIES

    try:
        client = client_factory(config)
    except Exception as e:
        return ConnectResult(error=StoreUnavailableError(f"new client err: {e}"))

    last_err: Optional[Exception] = None
    for tries in range(max_retries + 1):
        try:
            client.cat.indices()
        except OpenSearchException as e:
            last_err = e
        else:
            logger.info(f"Connected to OpenSearch at {', '.join(config.addresses)}")
            return ConnectResult(store=NotificationStore(client))

        if tries == max_retries:
            break

        delay = 2 ** tries
        logger.info(
            f"Failed to connect to OpenSearch, retrying... [{tries} / {max_retries}]. "
            f"Trying again after {delay}s: {last_err}"
        )
        sleep(delay)

    return ConnectResult(
        error=StoreUnavailableError(
            f"failed to connect to OpenSearch after {max_retries} retries: {last_err}"
        )
    )
