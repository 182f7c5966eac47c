class IngestError(Exception):
    """Base class for everything that can go wrong while ingesting a notification."""


class ClientInputError(IngestError):
    """The sender's payload cannot be accepted (HTTP 400)."""


class EmptyBodyError(ClientInputError):
    def __init__(self):
        super().__init__("got empty request body")


class DecodeError(ClientInputError):
    pass


class UnsupportedVersionError(ClientInputError):
    def __init__(self, version: str, supported: str):
        self.version = version
        super().__init__(
            f'do not understand webhook version "{version}", only version "{supported}" is supported'
        )


class BodyReadError(IngestError):
    """The request body could not be read from the connection (HTTP 500)."""


class StoreWriteError(IngestError):
    """The index call against OpenSearch failed."""


class StoreUnavailableError(IngestError):
    """OpenSearch never answered the liveness probe within the retry budget."""
