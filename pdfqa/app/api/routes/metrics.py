"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - otp_challenges_issued_total{purpose}
    - otp_verifications_total{purpose, outcome}
    - sessions_issued_total{flow}
    - documents_uploaded_total{outcome}
    - inference_latency_ms{outcome}
    - inference_errors_total{reason}
    """
    metrics_output = generate_latest()
    return Response(content=metrics_output, media_type=CONTENT_TYPE_LATEST)
