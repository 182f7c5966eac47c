import re
from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field, field_validator

SUPPORTED_WEBHOOK_VERSION = "4"

# what Alertmanager sends for an unset time
ZERO_TIME = "0001-01-01T00:00:00Z"

RFC3339_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


def _none_as_empty(v: Any, empty: Any) -> Any:
    return empty if v is None else v


class Alert(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: str = ""
    labels: Dict[str, str] = {}
    annotations: Dict[str, str] = {}
    # kept as sent, nanoseconds included
    starts_at: str = Field(default=ZERO_TIME, alias="startsAt")
    ends_at: str = Field(default=ZERO_TIME, alias="endsAt")
    generator_url: str = Field(default="", alias="generatorURL")
    fingerprint: str = ""

    @field_validator("labels", "annotations", mode="before")
    @classmethod
    def null_map(cls, v):
        return _none_as_empty(v, {})

    @field_validator("starts_at", "ends_at", mode="before")
    @classmethod
    def rfc3339(cls, v):
        if v is None:
            return ZERO_TIME
        if not isinstance(v, str) or not RFC3339_RE.match(v):
            raise ValueError(f"not an RFC3339 timestamp: {v!r}")
        return v


class Notification(BaseModel):
    """One Alertmanager webhook delivery, as stored in OpenSearch."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    alerts: List[Alert] = []
    common_annotations: Dict[str, str] = Field(default={}, alias="commonAnnotations")
    common_labels: Dict[str, str] = Field(default={}, alias="commonLabels")
    external_url: str = Field(default="", alias="externalURL")
    group_labels: Dict[str, str] = Field(default={}, alias="groupLabels")
    receiver: str = ""
    status: str = ""
    version: str = ""
    group_key: str = Field(default="", alias="groupKey")
    truncated_alerts: int = Field(default=0, alias="truncatedAlerts")

    # when the notification was accepted, always set server-side
    timestamp: str = Field(default="", alias="@timestamp")

    @field_validator("common_annotations", "common_labels", "group_labels", mode="before")
    @classmethod
    def null_map(cls, v):
        return _none_as_empty(v, {})

    @field_validator("alerts", mode="before")
    @classmethod
    def null_list(cls, v):
        return _none_as_empty(v, [])

    def to_document(self) -> str:
        return self.model_dump_json(by_alias=True)
