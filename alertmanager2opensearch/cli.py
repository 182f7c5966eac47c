import platform
from typing import List, Optional

from dotenv import load_dotenv
load_dotenv(".env")  # load environment variables for local dev

import typer
import uvicorn
from loguru import logger

from alertmanager2opensearch.config import (
    DEFAULT_ADDRESS,
    DEFAULT_BIND,
    DEFAULT_INDEX,
    DEFAULT_MAX_RETRIES,
    LoggingConfig,
    OpenSearchConfig,
    Settings,
    parse_bind,
)
from alertmanager2opensearch.logging import configure_logging
from alertmanager2opensearch.main import __version__, create_app
from alertmanager2opensearch.storage.opensearch_store import connect_opensearch

app = typer.Typer(help="Store Alertmanager webhook notifications in OpenSearch")


def build_settings(
    addresses: List[str],
    username: Optional[str],
    password: Optional[str],
    index: str,
    retries: int,
    timeout: float,
    verify_certs: bool,
    bind: str,
    debug: bool,
    verbose: bool,
    log_json: bool,
) -> Settings:
    # OPENSEARCH_ADDRESS is split on whitespace by click; flags may also carry several urls
    urls = tuple(u for a in addresses for u in a.split() if u)
    return Settings(
        opensearch=OpenSearchConfig(
            addresses=urls or (DEFAULT_ADDRESS,),
            username=username or None,
            password=password or None,
            index=index,
            max_retries=retries,
            timeout=timeout,
            verify_certs=verify_certs,
        ),
        logging=LoggingConfig(debug=debug, verbose=verbose, json_format=log_json),
        server_bind=bind,
    )


@app.command()
def serve(
    addresses: List[str] = typer.Option(
        [DEFAULT_ADDRESS],
        "--opensearch.address",
        envvar="OPENSEARCH_ADDRESS",
        help="OpenSearch urls",
    ),
    username: Optional[str] = typer.Option(
        None,
        "--opensearch.username",
        envvar="OPENSEARCH_USERNAME",
        help="OpenSearch username for HTTP Basic Authentication",
    ),
    password: Optional[str] = typer.Option(
        None,
        "--opensearch.password",
        envvar="OPENSEARCH_PASSWORD",
        help="OpenSearch password for HTTP Basic Authentication",
        show_default=False,
    ),
    index: str = typer.Option(
        DEFAULT_INDEX,
        "--opensearch.index",
        envvar="OPENSEARCH_INDEX",
        help="OpenSearch index name (placeholders: %y for year, %m for month and %d for day)",
    ),
    retries: int = typer.Option(
        DEFAULT_MAX_RETRIES,
        "--opensearch.retries",
        envvar="OPENSEARCH_RETRIES",
        min=0,
        help="Connection attempts at startup before giving up",
    ),
    timeout: float = typer.Option(
        10.0,
        "--opensearch.timeout",
        envvar="OPENSEARCH_TIMEOUT",
        help="OpenSearch request timeout in seconds",
    ),
    verify_certs: bool = typer.Option(
        True,
        "--opensearch.verify-certs/--opensearch.no-verify-certs",
        envvar="OPENSEARCH_VERIFY_CERTS",
        help="Verify OpenSearch TLS certificates",
    ),
    bind: str = typer.Option(
        DEFAULT_BIND,
        "--bind",
        envvar="SERVER_BIND",
        help="Server address",
    ),
    debug: bool = typer.Option(False, "--debug", envvar="DEBUG", help="debug mode"),
    verbose: bool = typer.Option(False, "--verbose", "-v", envvar="VERBOSE", help="verbose mode"),
    log_json: bool = typer.Option(
        False,
        "--log.json",
        envvar="LOG_JSON",
        help="Switch log output to json format",
    ),
):
    """Connect to OpenSearch and serve /webhook, /healthz and /metrics."""
    try:
        host, port = parse_bind(bind)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--bind")

    settings = build_settings(
        addresses, username, password, index, retries, timeout,
        verify_certs, bind, debug, verbose, log_json,
    )
    configure_logging(settings.logging)

    logger.info(f"starting alertmanager2opensearch v{__version__} (python {platform.python_version()})")
    logger.info(settings.to_log_json())

    result = connect_opensearch(settings.opensearch)
    if not result.ok:
        logger.error(str(result.error))
        raise typer.Exit(code=1)

    web = create_app(settings, result.store)

    logger.info(f"starting http server on {settings.server_bind}")
    uvicorn.run(web, host=host, port=port, timeout_keep_alive=30, log_level="warning")


def main():
    app()


if __name__ == "__main__":
    main()
