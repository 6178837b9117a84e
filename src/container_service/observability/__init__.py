from container_service.observability.endpoint import MetricsServer, create_metrics_app
from container_service.observability.metrics import BuildMetrics, BuildTracker, RequestMetrics

__all__ = [
    "BuildMetrics",
    "BuildTracker",
    "MetricsServer",
    "RequestMetrics",
    "create_metrics_app",
]
