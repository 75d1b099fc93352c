from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Tuple
import logging

from reconciler.core.window import FilterDecision, TimeWindow, filter_build
from reconciler.models.builds import BuildDetail

logger = logging.getLogger(__name__)

class Generation(str, Enum):
    DRONE1 = "drone1"
    DRONE2 = "drone2"

@dataclass
class CorrelationBucket:
    """Admitted builds of both Drone generations for one commit"""
    drone1_builds: List[BuildDetail] = field(default_factory=list)
    drone2_builds: List[BuildDetail] = field(default_factory=list)

    def builds_for(self, generation: Generation) -> List[BuildDetail]:
        if generation == Generation.DRONE1:
            return self.drone1_builds
        return self.drone2_builds

    @property
    def is_comparable(self) -> bool:
        return bool(self.drone1_builds) and bool(self.drone2_builds)

class CorrelationMap:
    """Commit id to bucket, filled append-only while retrieving builds"""

    def __init__(self):
        self._buckets: Dict[str, CorrelationBucket] = {}

    def add(self, generation: Generation, detail: BuildDetail) -> None:
        bucket = self._buckets.setdefault(detail.commit, CorrelationBucket())
        bucket.builds_for(generation).append(detail)

    def get(self, commit: str) -> CorrelationBucket:
        return self._buckets.get(commit, CorrelationBucket())

    def items(self) -> Iterator[Tuple[str, CorrelationBucket]]:
        return iter(self._buckets.items())

    def comparable(self) -> Iterator[Tuple[str, CorrelationBucket]]:
        """Buckets holding builds from both generations"""
        return ((commit, bucket) for commit, bucket in self.items() if bucket.is_comparable)

    def __len__(self) -> int:
        return len(self._buckets)

    def __contains__(self, commit: str) -> bool:
        return commit in self._buckets

def collect_builds(
    correlation_map: CorrelationMap,
    generation: Generation,
    client,
    window: TimeWindow,
    develop: bool = False
) -> int:
    """Drain one backend's build list into the map until the window is exhausted"""
    admitted = 0
    for build in client.get_builds_paginated():
        result = filter_build(build, window, client, develop)
        if result.decision == FilterDecision.STOP:
            break
        if result.decision == FilterDecision.SKIP:
            continue
        correlation_map.add(generation, result.detail)
        admitted += 1
    logger.info(f"Collected {admitted} {generation.value} build(s) in window")
    return admitted

def build_correlation_map(
    window: TimeWindow,
    drone1_client,
    drone2_client,
    develop: bool = False
) -> CorrelationMap:
    """Collect Drone 1 builds, then Drone 2 builds, keyed by commit"""
    correlation_map = CorrelationMap()
    collect_builds(correlation_map, Generation.DRONE1, drone1_client, window, develop)
    collect_builds(correlation_map, Generation.DRONE2, drone2_client, window, develop)
    return correlation_map
