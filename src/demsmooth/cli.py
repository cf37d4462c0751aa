from __future__ import annotations

import warnings
from pathlib import Path
from typing import Final

import typer

from . import __version__
from .demo import DemoFormatError, dump, load
from .pipeline import PASS_CAMERA_PITCH_YAW, PASS_CAMERA_ROLL, PASS_MOTION, PASS_ROLL, PassReport, process_demo

app = typer.Typer(add_completion=False)

DEMO_SUFFIX: Final[str] = ".dem"
PROCESSED_SUFFIX: Final[str] = "_processed.dem"

_PASS_MESSAGES: Final[dict[str, str]] = {
    PASS_MOTION: "motion smoothed",
    PASS_CAMERA_PITCH_YAW: "camera smoothed, x and y axes",
    PASS_ROLL: "camera rolls added",
    PASS_CAMERA_ROLL: "camera smoothed, z axis",
}


class OutputNameError(ValueError):
    pass


def output_path_for(path: Path) -> Path:
    path = Path(path)
    name = path.name
    if not name.endswith(DEMO_SUFFIX):
        raise OutputNameError(f"could not create valid out filename from {path}")
    return path.with_name(name[: -len(DEMO_SUFFIX)] + PROCESSED_SUFFIX)


def _format_report(report: PassReport) -> str:
    text = _PASS_MESSAGES.get(report.name, report.name)
    stats = report.stats
    if stats is None:
        return f"{text} ({report.written} blocks)"
    return f"{text} ({stats.applied} of {stats.samples} samples, {stats.restarts} restarts)"


def _echo_warnings(caught: list[warnings.WarningMessage]) -> None:
    counts: dict[str, int] = {}
    for item in caught:
        text = str(item.message)
        counts[text] = counts.get(text, 0) + 1
    for text, count in counts.items():
        suffix = f" (x{count})" if count > 1 else ""
        typer.echo(f"warning: {text}{suffix}", err=True)


@app.command()
def cmd_smooth(
    demo_file: Path | None = typer.Argument(None, help="demo file path (.dem)", show_default=False),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="only report errors and warnings"),
    version: bool = typer.Option(False, "--version", help="print version and exit"),
) -> None:
    """Smooth camera and motion in a demo and add camera roll.

    Writes <demoname>_processed.dem next to the input.
    """

    if version:
        typer.echo(f"demsmooth {__version__}")
        raise typer.Exit()
    if demo_file is None:
        typer.echo(f"demsmooth {__version__}\nusage:\n\n  demsmooth <demoname.dem>\n\nwill produce <demoname>_processed.dem", err=True)
        raise typer.Exit(code=1)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            demo = load(demo_file)
        except (OSError, DemoFormatError) as exc:
            _echo_warnings(caught)
            typer.echo(f"demo not opened: {exc}", err=True)
            raise typer.Exit(code=1) from exc

        try:
            out_path = output_path_for(demo_file)
        except OutputNameError as exc:
            _echo_warnings(caught)
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1) from exc

        reports = process_demo(demo)
    _echo_warnings(caught)

    if not quiet:
        for report in reports:
            typer.echo(_format_report(report))

    try:
        dump(demo, out_path)
    except (OSError, DemoFormatError) as exc:
        typer.echo(f"demo not written: {exc}", err=True)
        return
    typer.echo(f"wrote {out_path}")


def main(argv: list[str] | None = None) -> None:
    app(prog_name="demsmooth", args=argv)


if __name__ == "__main__":
    main()
