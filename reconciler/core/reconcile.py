from typing import List, Optional, Tuple
import logging

from reconciler.core.config import Settings, settings as default_settings
from reconciler.core.correlation import Generation, build_correlation_map
from reconciler.core.drone_client import DroneClient
from reconciler.core.metrics import iter_report_rows
from reconciler.core.window import TimeWindow
from reconciler.models.report import ReportRow

logger = logging.getLogger(__name__)

def create_clients(
    drone1_token: Optional[str] = None,
    drone2_token: Optional[str] = None,
    config: Optional[Settings] = None
) -> Tuple[DroneClient, DroneClient]:
    """Drone 1 and Drone 2 clients for the configured repository"""
    config = config or default_settings
    drone1_client = DroneClient(
        Generation.DRONE1.value,
        config.DRONE1_URL,
        drone1_token if drone1_token is not None else config.DRONE1_TOKEN,
        config.REPO_OWNER,
        config.REPO_NAME,
        timeout=config.REQUEST_TIMEOUT
    )
    drone2_client = DroneClient(
        Generation.DRONE2.value,
        config.DRONE2_URL,
        drone2_token if drone2_token is not None else config.DRONE2_TOKEN,
        config.REPO_OWNER,
        config.REPO_NAME,
        timeout=config.REQUEST_TIMEOUT
    )
    return drone1_client, drone2_client

def reconcile(window: TimeWindow, drone1_client, drone2_client, develop: bool = False) -> List[ReportRow]:
    """Collect both backends' builds in the window and compute every report row.

    Rows are fully materialized so a fatal error never leaves a partial report.
    """
    logger.info(
        f"Comparing {'develop push' if develop else 'pull request'} builds "
        f"between {window.end.isoformat()} and {window.start.isoformat()}"
    )
    correlation_map = build_correlation_map(window, drone1_client, drone2_client, develop)
    rows = list(iter_report_rows(correlation_map))
    logger.info(f"Compared {len(rows)} of {len(correlation_map)} commit(s)")
    return rows
