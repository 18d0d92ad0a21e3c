import sys
import argparse
import logging

try:
    from rich.console import Console
    from rich.table import Table
    from rich.panel import Panel
    from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn
    from rich.logging import RichHandler
    from rich import box
except ImportError:
    print("Error: The 'rich' library is required for the CLI but not installed.", file=sys.stderr)
    print("Please install it with: pip install woosh", file=sys.stderr)
    sys.exit(1)

from wooshlib import __version__
from wooshlib.audio import format_duration
from wooshlib.config import (
    ConfigError, default_config, load_preset, merge_configs, save_preset,
)
from wooshlib.events import CLIP_COMPLETE, EventBus
from wooshlib.models import FadeCurve, JobStatus
from wooshlib.pipeline import Pipeline, export_clips, load_clips
from wooshlib.processors import default_processors

console = Console()


def non_negative_float(value):
    fvalue = float(value)
    if fvalue < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return fvalue


def build_parser():
    parser = argparse.ArgumentParser(
        description="Woosh - batch editor for game audio clips",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--version", action="version",
                        version=f"woosh {__version__}")

    parser.add_argument("paths", nargs="+",
                        help="Audio files or directories (.wav, .aif, .aiff, .flac, .mp3)")

    # Normalization
    parser.add_argument("--normalize", choices=["peak", "rms"], default=None,
                        help="Normalize every clip to --target")
    parser.add_argument("--target", type=float, default=None,
                        help="Normalization target in dBFS (peak: -1.0, rms: -18.0 if omitted)")

    # Compressor
    parser.add_argument("--compress", action="store_true",
                        help="Run the compressor")
    parser.add_argument("--threshold", type=float, default=-12.0,
                        help="Compressor threshold (dB)")
    parser.add_argument("--ratio", type=float, default=4.0,
                        help="Compressor ratio (N:1)")
    parser.add_argument("--attack", type=non_negative_float, default=10.0,
                        help="Compressor attack (ms)")
    parser.add_argument("--release", type=non_negative_float, default=100.0,
                        help="Compressor release (ms)")
    parser.add_argument("--makeup", type=float, default=0.0,
                        help="Compressor makeup gain (dB)")

    # Fades / trim
    parser.add_argument("--fade-in-ms", type=non_negative_float, default=0.0,
                        help="Fade-in length (ms)")
    parser.add_argument("--fade-out-ms", type=non_negative_float, default=0.0,
                        help="Fade-out length (ms)")
    parser.add_argument("--fade-curve", choices=[c.value for c in FadeCurve],
                        default=FadeCurve.LINEAR.value,
                        help="Fade curve shape")
    parser.add_argument("--trim-start", type=non_negative_float, default=0.0,
                        help="Seconds to cut from the head of each clip")
    parser.add_argument("--trim-end", type=non_negative_float, default=0.0,
                        help="Keep audio up to this time in seconds (0 = to end)")

    # Presets
    parser.add_argument("--preset", type=str, default=None,
                        help="JSON preset to load; command line flags override it")
    parser.add_argument("--save-preset", type=str, default=None,
                        help="Write the effective settings to this JSON preset")

    # Output
    parser.add_argument("-x", "--execute", action="store_true",
                        help="Write processed files. Without -x this is a dry run.")
    parser.add_argument("-o", "--output", type=str, default="processed",
                        help="Output directory for processed files")
    parser.add_argument("--format", type=str, default="wav",
                        help="Output file extension")
    parser.add_argument("--workers", type=int, default=0,
                        help="Worker threads (0 = automatic)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log library messages to the console")
    return parser


def parse_arguments(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.ratio < 1.0:
        parser.error("--ratio must be >= 1")
    if args.workers < 0:
        parser.error("--workers must be >= 0")
    if args.trim_end and args.trim_end <= args.trim_start:
        parser.error("--trim-end must be greater than --trim-start")

    return args


# config key -> argparse dest, for flags that always carry a value
_PRESET_FLAGS = {
    "max_workers": "workers",
    "trim_start_sec": "trim_start",
    "trim_end_sec": "trim_end",
    "fade_in_ms": "fade_in_ms",
    "fade_out_ms": "fade_out_ms",
    "fade_curve": "fade_curve",
}


def build_config(args) -> dict:
    """Defaults, then the preset, then explicit command line flags."""
    config = default_config()
    if args.preset:
        config = merge_configs(config, load_preset(args.preset))

    overrides = {
        "max_workers": args.workers,
        "trim_start_sec": args.trim_start,
        "trim_end_sec": args.trim_end,
        "fade_in_ms": args.fade_in_ms,
        "fade_out_ms": args.fade_out_ms,
        "fade_curve": args.fade_curve,
    }
    if args.normalize == "peak":
        overrides["peak_normalize"] = True
        if args.target is not None:
            overrides["target_peak"] = args.target
    elif args.normalize == "rms":
        overrides["rms_normalize"] = True
        if args.target is not None:
            overrides["target_rms"] = args.target
    if args.compress:
        overrides.update({
            "compress": True,
            "comp_threshold_db": args.threshold,
            "comp_ratio": args.ratio,
            "comp_attack_ms": args.attack,
            "comp_release_ms": args.release,
            "comp_makeup_db": args.makeup,
        })
    if args.preset:
        # only flags changed from their defaults override the preset
        parser = build_parser()
        overrides = {
            key: value for key, value in overrides.items()
            if key not in _PRESET_FLAGS
            or getattr(args, _PRESET_FLAGS[key]) != parser.get_default(_PRESET_FLAGS[key])
        }
    return merge_configs(config, overrides)


def _fmt_db(value: float) -> str:
    if value == float("-inf"):
        return "-inf"
    return f"{value:.1f}"


def print_results(items):
    table = Table(box=box.ROUNDED, title="Clips")
    table.add_column("Clip", style="cyan", max_width=32)
    table.add_column("Length", style="dim", justify="right")
    table.add_column("Peak before", justify="right")
    table.add_column("Peak after", justify="right", style="bold green")
    table.add_column("RMS before", justify="right")
    table.add_column("RMS after", justify="right", style="bold green")
    table.add_column("Status", justify="right")

    for item in items:
        src = item.source
        out = item.output
        if item.status == JobStatus.CANCELLED or out is None:
            table.add_row(src.display_name, "—", _fmt_db(src.peak_db), "—",
                          _fmt_db(src.rms_db), "—", "[yellow]CANCELLED[/]")
            continue
        status = "[red]ERR[/]" if item.errors else "[green]OK[/]"
        table.add_row(
            src.display_name,
            format_duration(out.frame_count, out.samplerate),
            _fmt_db(src.peak_db),
            _fmt_db(out.peak_db),
            _fmt_db(src.rms_db),
            _fmt_db(out.rms_db),
            status,
        )
    console.print(table)

    for item in items:
        for err in item.errors:
            console.print(f"  [red]✗ {item.source.display_name}: {err}[/]")


# ---------------------------------------------------------------------------
# main() - thin wrapper around the wooshlib pipeline
# ---------------------------------------------------------------------------

def main(argv=None):
    args = parse_arguments(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(message)s", datefmt="[%X]",
            handlers=[RichHandler(console=console, rich_tracebacks=True)],
        )

    try:
        config = build_config(args)
    except ConfigError as e:
        console.print(f"[bold red]Error:[/] {e}")
        return 1

    if args.save_preset:
        save_preset(config, args.save_preset)
        console.print(f"[dim]Preset saved to: {args.save_preset}[/]")

    mode_label = "EXECUTE" if args.execute else "DRY-RUN"
    norm_label = args.normalize or "off"
    console.print(Panel.fit(
        f"[bold]Woosh[/]\n"
        f"Mode: [cyan]{mode_label}[/]\n"
        f"Normalize: [cyan]{norm_label}[/] | Compress: [cyan]{'on' if config.get('compress') else 'off'}[/]\n"
        f"Fades: [cyan]{config['fade_in_ms']:g} / {config['fade_out_ms']:g} ms[/] ({config['fade_curve']})\n"
        f"Output: [green]{args.output}/[/]",
        title="Configuration"
    ))

    clips, failures = load_clips(args.paths)
    for err in failures.values():
        console.print(f"[red]✗ {err}[/]")
    if not clips:
        console.print("[red]No audio files found.[/]")
        return 1

    event_bus = EventBus()
    try:
        pipeline = Pipeline(default_processors(), config=config, event_bus=event_bus)
    except ConfigError as e:
        console.print(f"[bold red]Error:[/] {e}")
        return 1

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
    ) as progress:
        task_id = progress.add_task("[cyan]Processing clips...", total=len(clips))

        def on_clip_complete(**data):
            progress.advance(task_id)

        with event_bus.listening(CLIP_COMPLETE, on_clip_complete):
            try:
                items = pipeline.process(clips)
            except KeyboardInterrupt:
                pipeline.cancel()
                raise

    print_results(items)

    if not args.execute:
        console.print("\n[dim]Dry run: nothing written. Use -x to write files.[/]")
        return 0

    written = export_clips(items, args.output, args.format)
    console.print(f"\n[dim]{len(written)} file(s) written to: {args.output}[/]")
    return 1 if any(i.errors for i in items) or failures else 0


if __name__ == "__main__":
    sys.exit(main())
