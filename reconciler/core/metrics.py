import re
from typing import Iterator, Optional
import logging

from reconciler.core.correlation import CorrelationBucket, CorrelationMap
from reconciler.core.exceptions import ContractViolation, MissingBuildComponent
from reconciler.models.builds import BuildDetail, BuildStatus, Stage, Step
from reconciler.models.report import ReportRow

logger = logging.getLogger(__name__)

PULL_REQUEST_STAGE = "build-pull-request"
UNIT_TEST_STEP = "run-wallet-platform-unit-tests"
AWAIT_TEST_STEP = "await-wallet-platform-test-status"
WALLET_PLATFORM_STAGE = re.compile(r"^wallet-platform-.*")
THREE_MINUTES = 3 * 60

def wallet_platform_system_status(build: BuildDetail) -> BuildStatus:
    """Fold the status of every wallet-platform-* stage of a Drone 2 build.

    Failure is absorbing, skipped stages leave a success untouched and any
    other non-success status turns the result into a failure.
    """
    if not build.stages or not all(stage.is_gen2 for stage in build.stages):
        raise ContractViolation(
            f"System status needs a Drone 2 build; build {build.number} has no Drone 2 stages",
            {"build_number": build.number}
        )

    status = BuildStatus.SUCCESS
    for stage in build.stages:
        if not WALLET_PLATFORM_STAGE.match(stage.name):
            continue
        if status == BuildStatus.FAILURE:
            break
        if stage.status not in (BuildStatus.SUCCESS, BuildStatus.SKIPPED):
            status = BuildStatus.FAILURE
    return status

def is_within_three_minutes(delta_seconds: int) -> bool:
    return delta_seconds < THREE_MINUTES

def _require_stage(build: BuildDetail, name: str) -> Stage:
    stage = build.get_stage(name)
    if stage is None:
        raise MissingBuildComponent("stage", name, build.number)
    return stage

def _require_step(stage: Stage, name: str, build: BuildDetail) -> Step:
    step = stage.get_step(name)
    if step is None:
        raise MissingBuildComponent("step", name, build.number)
    return step

def compute_row(commit: str, bucket: CorrelationBucket) -> Optional[ReportRow]:
    """Compare the earliest build of each generation for a commit.

    Returns None when there is nothing to compare: a side without builds, or
    a unit test step that was skipped. Missing stages and steps raise
    MissingBuildComponent; a link without a path raises InvalidBuildLink.
    """
    if not bucket.is_comparable:
        return None

    drone1_build = min(bucket.drone1_builds, key=lambda build: build.number)
    drone2_build = min(bucket.drone2_builds, key=lambda build: build.number)
    pr_number = drone1_build.get_pr_number()
    pr_url = drone2_build.get_pr_url()

    stage = _require_stage(drone1_build, PULL_REQUEST_STAGE)
    unit_test_step = _require_step(stage, UNIT_TEST_STEP, drone1_build)
    if unit_test_step.status == BuildStatus.SKIPPED:
        logger.info(f"Unit tests skipped in build '{drone1_build.number}', ignoring commit {commit}")
        return None
    await_test_step = _require_step(stage, AWAIT_TEST_STEP, drone1_build)

    system_status = wallet_platform_system_status(drone2_build)
    await_stopped = await_test_step.stopped_timestamp()
    delta = await_stopped - unit_test_step.started_timestamp()

    return ReportRow(
        pr_number=pr_number,
        pr_url=pr_url,
        git_sha=commit,
        drone1_build_number=drone1_build.number,
        drone2_build_number=drone2_build.number,
        drone1_unit_test_status=unit_test_step.status,
        drone1_await_test_status=await_test_step.status,
        drone2_system_status=system_status,
        drone1_unit_test_elapsed_time=unit_test_step.elapsed_time(),
        drone2_total_elapsed_time=await_stopped - drone2_build.started,
        await_within_three_minutes_of_unit_test_start=is_within_three_minutes(delta),
        delta_await_complete_to_unit_test_start=delta
    )

def iter_report_rows(correlation_map: CorrelationMap) -> Iterator[ReportRow]:
    """Yield one row per comparable commit, skipping commits missing a stage or step"""
    for commit, bucket in correlation_map.comparable():
        try:
            row = compute_row(commit, bucket)
        except MissingBuildComponent as e:
            logger.warning(e.message)
            continue
        if row is not None:
            yield row
