"""
Time window admission filter.

window_start and window_end are ordered from the perspective of a Drone build
list, which runs from "now" into the past. A build is compared only when it is
fully contained in the window: created after window_end and finished before
window_start. With a 5 hour window offset by 3 hours:

    (past)---*---*---*---*---*---*---*---*---(now)
         ^                     ^                   ^
         |------- 5 hrs -------|<------ 3 hrs -----|
         |   window_duration   |    window_offset  |
     window_end           window_start
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional
import logging

from reconciler.models.builds import BuildDetail, BuildEvent, BuildStatus, BuildSummary

logger = logging.getLogger(__name__)

DEVELOP_BRANCH = "develop"

class FilterDecision(str, Enum):
    STOP = "stop"
    SKIP = "skip"
    ADMIT = "admit"

@dataclass(frozen=True)
class TimeWindow:
    """[end, start] range, start being the bound closer to now"""
    start: datetime
    end: datetime

    @classmethod
    def from_hours(cls, duration_hours: float, offset_hours: float = 0, now: Optional[datetime] = None) -> "TimeWindow":
        now = now or datetime.now(timezone.utc)
        start = now - timedelta(hours=offset_hours)
        return cls(start=start, end=start - timedelta(hours=duration_hours))

    @property
    def start_timestamp(self) -> float:
        return self.start.timestamp()

    @property
    def end_timestamp(self) -> float:
        return self.end.timestamp()

@dataclass(frozen=True)
class FilterResult:
    decision: FilterDecision
    detail: Optional[BuildDetail] = None

def _matches_mode(build: BuildSummary, develop: bool) -> bool:
    if develop:
        return (
            build.event == BuildEvent.PUSH
            and build.source == DEVELOP_BRANCH
            and build.target == DEVELOP_BRANCH
        )
    return build.event == BuildEvent.PULL_REQUEST

def classify_build(build: BuildSummary, window: TimeWindow, develop: bool = False) -> FilterDecision:
    """Decide whether a list entry ends the scan, is skipped, or is compared.

    Only the finished and created timestamps are consulted.
    """
    finished = build.finished
    created = build.created

    # Created and finished before the window: no older build can be inside it
    if finished < window.end_timestamp and created < window.end_timestamp:
        return FilterDecision.STOP
    # Straddles a window boundary
    if finished > window.start_timestamp or created < window.end_timestamp:
        return FilterDecision.SKIP

    if not _matches_mode(build, develop):
        return FilterDecision.SKIP
    if build.status == BuildStatus.RUNNING:
        return FilterDecision.SKIP

    return FilterDecision.ADMIT

def filter_build(build: BuildSummary, window: TimeWindow, client, develop: bool = False) -> FilterResult:
    """Classify a build and fetch its details when it is admitted"""
    decision = classify_build(build, window, develop)
    if decision != FilterDecision.ADMIT:
        return FilterResult(decision)
    logger.debug(f"Admitted {client.name} build {build.number} for commit {build.commit}")
    return FilterResult(decision, client.get_build_info(build.number))
