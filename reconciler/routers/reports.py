from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse
from datetime import datetime, timezone
import io
import logging

from reconciler.core.config import settings
from reconciler.core.reconcile import create_clients, reconcile
from reconciler.core.report import write_rows
from reconciler.core.window import TimeWindow
from reconciler.models.report import ReconciliationReport

logger = logging.getLogger(__name__)
router = APIRouter()

def _run(window_duration: float, window_offset: float, develop: bool):
    window = TimeWindow.from_hours(window_duration, window_offset)
    drone1_client, drone2_client = create_clients()
    with drone1_client, drone2_client:
        return window, reconcile(window, drone1_client, drone2_client, develop)

@router.get("/", response_model=ReconciliationReport)
def get_report(
    window_duration: float = Query(..., gt=0, le=24 * 7, description="Window size in hours"),
    window_offset: float = Query(default=0, ge=0, description="Offset in hours from now"),
    develop: bool = Query(default=False, description="Compare develop pushes instead of pull requests")
):
    """Compare builds of both Drone generations within a window"""
    window, rows = _run(window_duration, window_offset, develop)
    return ReconciliationReport(
        window_start=window.start.isoformat(),
        window_end=window.end.isoformat(),
        develop=develop,
        rows=rows,
        total_rows=len(rows),
        timestamp=datetime.now(timezone.utc).isoformat()
    )

@router.get("/export")
def export_report(
    window_duration: float = Query(..., gt=0, le=24 * 7, description="Window size in hours"),
    window_offset: float = Query(default=0, ge=0, description="Offset in hours from now"),
    develop: bool = Query(default=False, description="Compare develop pushes instead of pull requests")
):
    """Download the comparison as a delimited report"""
    _, rows = _run(window_duration, window_offset, develop)
    buffer = io.StringIO()
    write_rows(rows, buffer, settings.OUTPUT_DELIMITER)
    buffer.seek(0)
    return StreamingResponse(
        iter([buffer.getvalue()]),
        media_type="text/tab-separated-values",
        headers={"Content-Disposition": "attachment; filename=drone-reconciliation.tsv"}
    )
