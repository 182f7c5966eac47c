import sys

from loguru import logger

from alertmanager2opensearch.config import LoggingConfig

TEXT_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSS}Z {level}: {message}"
CALLER_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSS}Z {level} [{file}:{line} {function}]: {message}"


def configure_logging(config: LoggingConfig) -> None:
    """Replace loguru's default sink according to --verbose/--debug/--log.json."""
    level = "INFO"
    if config.verbose:
        level = "DEBUG"
    if config.debug:
        level = "TRACE"

    logger.remove()
    if config.json_format:
        logger.add(sys.stderr, level=level, serialize=True)
    elif config.debug:
        logger.add(sys.stderr, level=level, format=CALLER_FORMAT)
    else:
        logger.add(sys.stderr, level=level, format=TEXT_FORMAT)
