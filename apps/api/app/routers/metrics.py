from fastapi import APIRouter, Depends

from app.auth.dependencies import AuthContext, require_admin
from app.observability import metrics_store
from app.schemas.metrics import MetricsResponse
from app.services.broadcast import broadcaster

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("", summary="Observability metrics", response_model=MetricsResponse)
def metrics_endpoint(
    _auth: AuthContext = Depends(require_admin),
) -> MetricsResponse:
    snapshot = metrics_store.snapshot()

    return MetricsResponse(
        counters=snapshot.counters or {},
        timings=snapshot.timings or {},
        realtime_connections=broadcaster.connection_count,
        rooms=broadcaster.room_sizes(),
    )
