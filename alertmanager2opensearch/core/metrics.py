from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, generate_latest


class OutcomeCounters:
    """Received / invalid / successful counters for the webhook endpoint.

    received counts every request that reaches the handler, so at any time
    received >= invalid + successful.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else REGISTRY

        self.received = Counter(
            "alertmanager2es_alerts_received",
            "alertmanager2es received alerts",
            registry=self.registry,
        )
        self.invalid = Counter(
            "alertmanager2es_alerts_invalid",
            "alertmanager2es invalid alerts",
            registry=self.registry,
        )
        self.successful = Counter(
            "alertmanager2es_alerts_successful",
            "alertmanager2es successful stored alerts",
            registry=self.registry,
        )

    def exposition(self) -> bytes:
        return generate_latest(self.registry)
