# amenity_engine/routes/health.py
"""
Health check and Prometheus scrape endpoints.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Response

from ..core.config import settings
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> dict:
    return {
        "status": "healthy",
        "service": "resort-amenities",
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


@router.get("/metrics")
def metrics() -> Response:
    """Prometheus exposition of the service operation and reservation counters."""
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
