from __future__ import annotations

import warnings
from pathlib import Path

import typer

from .chart import ChartError, dump_chart_file, load_chart
from .config import DEFAULT_SETTINGS, SettingsError, load_settings
from .debug_log import close_trace_log, init_trace_log
from .frames import ButtonState, ButtonStateError
from .generator import generate_replay
from .objects import AutoplayInputError
from .replay import ReplayCodecError, StaleReplayWarning, dump_replay_file, load_replay
from .replay import binary as replay_binary
from .samples import two_b_sample_objects

app = typer.Typer(add_completion=False)

_FORMATS = ("json", "binary")


@app.command("generate")
def cmd_generate(
    chart_file: Path = typer.Argument(..., help="chart file path (.json)"),
    out: Path = typer.Option(..., "--out", help="output replay path"),
    fmt: str = typer.Option("json", "--format", help="json|binary"),
    speed: float = typer.Option(1.0, "--speed", min=0.01, help="playback speed multiplier"),
    delayed_movements: bool = typer.Option(
        False,
        "--delayed-movements",
        help="ease travel with in-out cubic instead of out",
    ),
    settings_file: Path | None = typer.Option(None, "--settings", help="generator settings (.json or .toml)"),
    trace_log: Path | None = typer.Option(
        None,
        "--trace-log",
        envvar="AUTOPLAY_TRACE_LOG",
        help="append generator trace lines to this file",
    ),
) -> None:
    """Generate a perfect-play replay for a chart."""
    if fmt not in _FORMATS:
        typer.echo(f"Invalid format: {fmt!r}. Choose from: {', '.join(_FORMATS)}", err=True)
        raise typer.Exit(code=1)

    try:
        settings = load_settings(settings_file) if settings_file is not None else DEFAULT_SETTINGS
        objects = load_chart(chart_file)
    except (SettingsError, ChartError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    except OSError as exc:
        typer.echo(f"failed to read input: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if trace_log is not None:
        init_trace_log(trace_log, chart=str(chart_file), speed=float(speed))
    try:
        replay = generate_replay(
            objects,
            settings=settings,
            speed=speed,
            delayed_movements=delayed_movements,
        )
    except (AutoplayInputError, ButtonStateError) as exc:
        typer.echo(f"generation failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        if trace_log is not None:
            close_trace_log()

    out = Path(out)
    out.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "binary":
        replay_binary.dump(replay, out)
    else:
        dump_replay_file(out, replay)
    typer.echo(f"wrote {len(replay.frames)} frames to {out}")


@app.command("inspect")
def cmd_inspect(
    replay_file: Path = typer.Argument(..., help="replay file path (.json.gz or binary)"),
) -> None:
    """Print a summary of a generated replay."""
    data = Path(replay_file).read_bytes()
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", StaleReplayWarning)
        try:
            if data.startswith(replay_binary.MAGIC):
                replay = replay_binary.loads(data, warn_stale=True)
            else:
                replay = load_replay(data, warn_stale=True)
        except ReplayCodecError as exc:
            typer.echo(f"invalid replay: {exc}", err=True)
            raise typer.Exit(code=1) from exc
    for warning in caught:
        typer.echo(f"warning: {warning.message}", err=True)

    header = replay.header
    typer.echo(f"generator_version={header.generator_version}")
    typer.echo(f"speed={header.speed:g} delayed_movements={header.delayed_movements}")
    typer.echo(f"objects={header.object_count} frames={len(replay.frames)}")
    typer.echo(f"time={replay.start_time:.3f}..{replay.end_time:.3f}")
    typer.echo(
        f"presses button_a={replay.press_count(ButtonState.BUTTON_A)} "
        f"button_b={replay.press_count(ButtonState.BUTTON_B)}"
    )


@app.command("sample-chart")
def cmd_sample_chart(
    out: Path = typer.Argument(..., help="output chart path (.json)"),
) -> None:
    """Write the concurrent-objects sample chart."""
    out = Path(out)
    out.parent.mkdir(parents=True, exist_ok=True)
    objects = two_b_sample_objects()
    dump_chart_file(out, objects, title="concurrent objects")
    typer.echo(f"wrote {len(objects)} objects to {out}")


def main(argv: list[str] | None = None) -> None:
    app(prog_name="autoplay", args=argv)


if __name__ == "__main__":
    main()
