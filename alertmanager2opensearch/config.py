from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, SecretStr

DEFAULT_ADDRESS = "http://localhost:9200"
DEFAULT_INDEX = "alertmanager-%y.%m"
DEFAULT_BIND = ":9097"
DEFAULT_MAX_RETRIES = 10


class OpenSearchConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    addresses: Tuple[str, ...] = (DEFAULT_ADDRESS,)
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    index: str = Field(
        default=DEFAULT_INDEX,
        description="index name (placeholders: %y for year, %m for month and %d for day)",
    )
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout: float = 10.0
    verify_certs: bool = True


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    debug: bool = False
    verbose: bool = False
    json_format: bool = False


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    opensearch: OpenSearchConfig = OpenSearchConfig()
    logging: LoggingConfig = LoggingConfig()
    server_bind: str = DEFAULT_BIND

    def to_log_json(self) -> str:
        # SecretStr renders as '**********'
        return self.model_dump_json()


def parse_bind(bind: str) -> Tuple[str, int]:
    """Split a Go-style listen address (":9097", "127.0.0.1:8080") into host and port."""
    host, sep, port = bind.rpartition(":")
    if not sep:
        raise ValueError(f"invalid bind address {bind!r}, expected [host]:port")
    try:
        port_num = int(port)
    except ValueError:
        raise ValueError(f"invalid port in bind address {bind!r}") from None
    if not 0 < port_num < 65536:
        raise ValueError(f"port out of range in bind address {bind!r}")
    host = host.strip("[]") or "0.0.0.0"
    return host, port_num
