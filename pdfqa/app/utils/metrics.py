"""Prometheus metrics for auth and Q&A flows."""

from prometheus_client import Counter, Histogram

# Auth metrics
otp_challenges_issued_total = Counter(
    "otp_challenges_issued_total",
    "Total OTP challenges issued",
    ["purpose"],
)

otp_verifications_total = Counter(
    "otp_verifications_total",
    "Total OTP verification attempts by outcome",
    ["purpose", "outcome"],
)

sessions_issued_total = Counter(
    "sessions_issued_total",
    "Total session credentials issued",
    ["flow"],
)

# Document / Q&A metrics
documents_uploaded_total = Counter(
    "documents_uploaded_total",
    "Total document uploads by outcome",
    ["outcome"],
)

inference_latency_ms = Histogram(
    "inference_latency_ms",
    "Inference gateway latency in milliseconds",
    ["outcome"],
    buckets=[50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000],
)

inference_errors_total = Counter(
    "inference_errors_total",
    "Total inference gateway failures",
    ["reason"],
)


class PrometheusAuthMetrics:
    """Prometheus-based auth metrics implementation."""

    def inc_issued(self, purpose: str) -> None:
        """Increment issued-challenge counter."""
        otp_challenges_issued_total.labels(purpose=purpose).inc()

    def inc_verification(self, purpose: str, outcome: str) -> None:
        """Increment verification counter."""
        otp_verifications_total.labels(purpose=purpose, outcome=outcome).inc()

    def inc_session(self, flow: str) -> None:
        """Increment session counter."""
        sessions_issued_total.labels(flow=flow).inc()


class PrometheusQAMetrics:
    """Prometheus-based document and inference metrics implementation."""

    def inc_upload(self, outcome: str) -> None:
        """Increment upload counter."""
        documents_uploaded_total.labels(outcome=outcome).inc()

    def record_inference(self, outcome: str, latency_ms: float) -> None:
        """Record inference latency."""
        inference_latency_ms.labels(outcome=outcome).observe(latency_ms)

    def inc_inference_error(self, reason: str) -> None:
        """Increment inference error counter."""
        inference_errors_total.labels(reason=reason).inc()
