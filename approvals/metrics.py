"""
Prometheus metrics for the approval policy service.
"""
from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry


class Metrics:
    """
    Centralized metrics for the approval policy service.
    """

    def __init__(self, service_name: str = "approvals", version: str = "0.1.0", registry=None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()

        # HTTP Metrics
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["service", "method", "path", "status"],
            registry=self.registry,
        )

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["service", "method", "path"],
            registry=self.registry,
        )

        self.http_requests_active = Gauge(
            "http_requests_active",
            "Number of active HTTP requests",
            registry=self.registry,
        )

        # Application Info
        self.app_info = Info(
            "app",
            "Application information",
            registry=self.registry,
        )
        self.app_info.info({"service": service_name, "version": version})

        self.app_up = Gauge(
            "app_up",
            "Application up status (1=up, 0=down)",
            ["service", "version"],
            registry=self.registry,
        )
        self.app_up.labels(service=service_name, version=version).set(1)

        # Rule model metrics
        self.rules_decoded_total = Counter(
            "approvals_rules_decoded_total",
            "Policy triggers decoded into form state",
            ["outcome"],
            registry=self.registry,
        )

        self.rules_encoded_total = Counter(
            "approvals_rules_encoded_total",
            "Policy triggers encoded from form state",
            registry=self.registry,
        )

        self.conditions_unrecognised_total = Counter(
            "approvals_conditions_unrecognised_total",
            "Trigger elements the editor does not represent",
            registry=self.registry,
        )

        self.policy_saves_total = Counter(
            "approvals_policy_saves_total",
            "Policy save attempts",
            ["operation", "outcome"],
            registry=self.registry,
        )


# Default metrics instance shared by the form and the API
metrics = Metrics()
