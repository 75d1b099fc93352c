from pydantic import BaseModel
from typing import List

from reconciler.models.builds import BuildStatus

class ReportRow(BaseModel):
    """Comparison of how both Drone generations handled one commit"""
    pr_number: str
    pr_url: str
    git_sha: str
    drone1_build_number: int
    drone2_build_number: int
    drone1_unit_test_status: BuildStatus
    drone1_await_test_status: BuildStatus
    drone2_system_status: BuildStatus
    drone1_unit_test_elapsed_time: int
    drone2_total_elapsed_time: int
    await_within_three_minutes_of_unit_test_start: bool
    delta_await_complete_to_unit_test_start: int

class ReconciliationReport(BaseModel):
    """Report rows for one window"""
    window_start: str
    window_end: str
    develop: bool
    rows: List[ReportRow]
    total_rows: int
    timestamp: str
