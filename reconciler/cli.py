"""CLI interface for drone-build-reconciler."""

import logging
from pathlib import Path
from typing import Optional

import typer

from reconciler.core.config import settings
from reconciler.core.exceptions import ReconcilerException
from reconciler.core.reconcile import create_clients, reconcile
from reconciler.core.report import write_report
from reconciler.core.window import TimeWindow

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = typer.Typer(
    name="drone-reconcile",
    help="Compare how Drone 1 and Drone 2 built the same commits"
)


@app.command()
def compare(
    window_duration: float = typer.Argument(
        ...,
        min=0,
        help="Window size in hours; builds must be both created and finished within it"
    ),
    window_offset: Optional[float] = typer.Option(
        None, "--window-offset", "-w", min=0, help="Offset in hours from now to the start of the window"
    ),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Write the report to this file instead of stdout"
    ),
    develop: bool = typer.Option(
        False, "--develop", "-d", help="Compare develop branch pushes instead of pull requests"
    ),
    delimiter: str = typer.Option(settings.OUTPUT_DELIMITER, "--delimiter", help="Report field delimiter"),
    drone1_token: str = typer.Option(..., envvar="DRONE1_TOKEN", help="Drone 1 API token"),
    drone2_token: str = typer.Option(..., envvar="DRONE2_TOKEN", help="Drone 2 API token"),
) -> None:
    """Write one report row per commit built by both Drone generations."""
    window = TimeWindow.from_hours(window_duration, window_offset or 0)
    drone1_client, drone2_client = create_clients(drone1_token, drone2_token)
    try:
        with drone1_client, drone2_client:
            rows = reconcile(window, drone1_client, drone2_client, develop)
    except ReconcilerException as exc:
        logger.error(exc.message)
        raise typer.Exit(code=1)

    try:
        written = write_report(rows, file, delimiter)
    except OSError as exc:
        logger.error(f"Could not write report: {exc}")
        raise typer.Exit(code=1)
    if file is not None:
        logger.info(f"Wrote {written} row(s) to {file}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
