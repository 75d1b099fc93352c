"""Tests for the window admission filter."""

from datetime import datetime, timezone

import pytest

from reconciler.core.window import FilterDecision, TimeWindow, classify_build, filter_build

from factories import HOUR, NOW, FakeClient, detail_payload, pull_request_stage, summary, window


class TestTimeWindow:
    def test_from_hours_with_offset(self):
        now = datetime(2024, 5, 1, 12, tzinfo=timezone.utc)

        w = TimeWindow.from_hours(5, 3, now=now)

        assert w.start == datetime(2024, 5, 1, 9, tzinfo=timezone.utc)
        assert w.end == datetime(2024, 5, 1, 4, tzinfo=timezone.utc)

    def test_from_hours_defaults_to_now(self):
        w = TimeWindow.from_hours(2)

        assert (w.start - w.end).total_seconds() == 2 * HOUR
        assert abs((datetime.now(timezone.utc) - w.start).total_seconds()) < 60


class TestClassifyBuild:
    def test_contained_build_is_admitted(self):
        build = summary(1, created=NOW - 4 * HOUR, finished=NOW - HOUR)

        assert classify_build(build, window()) == FilterDecision.ADMIT

    def test_build_entirely_before_window_stops(self):
        build = summary(1, created=NOW - 6 * HOUR, finished=NOW - 6 * HOUR)

        assert classify_build(build, window()) == FilterDecision.STOP

    def test_build_finishing_after_window_start_is_skipped(self):
        build = summary(1, created=NOW - HOUR, finished=NOW + HOUR)

        assert classify_build(build, window()) == FilterDecision.SKIP

    def test_build_created_before_window_end_is_skipped(self):
        build = summary(1, created=NOW - 6 * HOUR, finished=NOW - 2 * HOUR)

        assert classify_build(build, window()) == FilterDecision.SKIP

    def test_build_containing_window_is_skipped(self):
        build = summary(1, created=NOW - 6 * HOUR, finished=NOW + HOUR)

        assert classify_build(build, window()) == FilterDecision.SKIP

    def test_only_created_and_finished_are_consulted(self):
        # started after finished, as Drone reports for a build still in flight
        build = summary(
            1,
            created=NOW - 4 * HOUR,
            started=NOW + 10 * HOUR,
            finished=NOW - HOUR,
            updated=NOW - 20 * HOUR,
        )
        stale = summary(2, created=NOW - 7 * HOUR, started=NOW, finished=NOW - 6 * HOUR, updated=NOW)

        assert classify_build(build, window()) == FilterDecision.ADMIT
        assert classify_build(stale, window()) == FilterDecision.STOP

    def test_far_future_timestamps_are_compared_as_epoch_seconds(self):
        far_future = 10 ** 12

        assert classify_build(summary(1, created=far_future, finished=far_future), window()) == FilterDecision.SKIP
        assert classify_build(summary(2, created=-far_future, finished=-far_future), window()) == FilterDecision.STOP

    def test_boundaries_are_inclusive(self):
        build = summary(1, created=NOW - 5 * HOUR, finished=NOW)

        assert classify_build(build, window()) == FilterDecision.ADMIT

    @pytest.mark.parametrize("event", ["push", "tag", "custom"])
    def test_pull_request_mode_skips_other_events(self, event):
        assert classify_build(summary(1, event=event), window()) == FilterDecision.SKIP

    def test_running_build_is_skipped(self):
        assert classify_build(summary(1, status="running"), window()) == FilterDecision.SKIP

    def test_failed_build_is_admitted(self):
        assert classify_build(summary(1, status="failure"), window()) == FilterDecision.ADMIT

    @pytest.mark.parametrize(
        "event, source, target, expected",
        [
            ("push", "develop", "develop", FilterDecision.ADMIT),
            ("push", "feature/x", "develop", FilterDecision.SKIP),
            ("push", "develop", "master", FilterDecision.SKIP),
            ("pull_request", "develop", "develop", FilterDecision.SKIP),
        ],
    )
    def test_develop_mode(self, event, source, target, expected):
        build = summary(1, event=event, source=source, target=target)

        assert classify_build(build, window(), develop=True) == expected


class TestFilterBuild:
    def test_admit_fetches_detail(self):
        client = FakeClient("drone1", [], {7: detail_payload(7, [pull_request_stage()])})

        result = filter_build(summary(7), window(), client)

        assert result.decision == FilterDecision.ADMIT
        assert result.detail.number == 7
        assert client.requested_builds == [7]

    def test_skip_and_stop_do_not_fetch(self):
        client = FakeClient("drone1", [])

        skipped = filter_build(summary(7, status="running"), window(), client)
        stopped = filter_build(summary(6, created=NOW - 9 * HOUR, finished=NOW - 8 * HOUR), window(), client)

        assert (skipped.decision, skipped.detail) == (FilterDecision.SKIP, None)
        assert (stopped.decision, stopped.detail) == (FilterDecision.STOP, None)
        assert client.requested_builds == []
