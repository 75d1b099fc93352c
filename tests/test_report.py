"""Tests for the delimited report writer."""

import io

from reconciler.core.report import REPORT_COLUMNS, format_row, write_report, write_rows
from reconciler.models.builds import BuildStatus
from reconciler.models.report import ReportRow


def _row(**overrides) -> ReportRow:
    values = dict(
        pr_number="4010",
        pr_url="https://github.com/acme/wallet/pull/4010",
        git_sha="abc123",
        drone1_build_number=10,
        drone2_build_number=20,
        drone1_unit_test_status=BuildStatus.SUCCESS,
        drone1_await_test_status=BuildStatus.FAILURE,
        drone2_system_status=BuildStatus.UNKNOWN,
        drone1_unit_test_elapsed_time=60,
        drone2_total_elapsed_time=130,
        await_within_three_minutes_of_unit_test_start=True,
        delta_await_complete_to_unit_test_start=150,
    )
    values.update(overrides)
    return ReportRow(**values)


class TestReport:
    def test_column_order(self):
        assert REPORT_COLUMNS == [
            "pr_number",
            "pr_url",
            "git_sha",
            "drone1_build_number",
            "drone2_build_number",
            "drone1_unit_test_status",
            "drone1_await_test_status",
            "drone2_system_status",
            "drone1_unit_test_elapsed_time",
            "drone2_total_elapsed_time",
            "await_within_three_minutes_of_unit_test_start",
            "delta_await_complete_to_unit_test_start",
        ]

    def test_format_row_uses_wire_values(self):
        cells = format_row(_row())

        assert cells[5:8] == ["success", "failure", "unknown"]
        assert cells[10] == "true"
        assert format_row(_row(await_within_three_minutes_of_unit_test_start=False))[10] == "false"

    def test_write_rows_tab_separated(self):
        stream = io.StringIO()

        count = write_rows([_row(), _row(git_sha="def456")], stream)

        lines = stream.getvalue().splitlines()
        assert count == 2
        assert lines[0].split("\t") == REPORT_COLUMNS
        assert lines[1].split("\t")[2] == "abc123"
        assert lines[2].split("\t")[2] == "def456"

    def test_write_report_to_file_with_delimiter(self, tmp_path):
        path = tmp_path / "report.csv"

        write_report([_row()], path, delimiter=",")

        header, line = path.read_text().splitlines()
        assert header.startswith("pr_number,pr_url,git_sha")
        assert line.endswith(",true,150")

    def test_write_report_to_stdout(self, capsys):
        write_report([], None)

        assert capsys.readouterr().out.split("\t")[0] == "pr_number"
