"""Prometheus-метрики сервиса."""

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.requests import Request
from starlette.responses import Response

# Время жизни PR от создания до merge, в часах
PR_LIFECYCLE_DURATION_HOURS = Histogram(
    "pr_lifecycle_duration_hours",
    "Time from PR creation to merge in hours",
    buckets=(1, 6, 12, 24, 48, 72, 168),
)

REVIEWER_REASSIGNMENTS = Counter(
    "reviewer_reassignments_total",
    "Reviewer replacements applied to open pull requests",
    ("reason",),
)


def observe_pr_merged(created_at, merged_at) -> None:
    """Зафиксировать время жизни PR при переходе OPEN -> MERGED."""
    if created_at is None or merged_at is None:
        return
    hours = (merged_at - created_at).total_seconds() / 3600
    PR_LIFECYCLE_DURATION_HOURS.observe(max(hours, 0.0))


def record_reassignments(reason: str, count: int = 1) -> None:
    if count > 0:
        REVIEWER_REASSIGNMENTS.labels(reason=reason).inc(count)


async def metrics_endpoint(request: Request) -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
