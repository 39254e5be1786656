"""Command line entry point for playtrack.

`playtrack simulate` drives a simulated player through a tracked session and
prints the events it produced. Analytics settings come from the environment
(PLAYTRACK_SEGMENT_ENABLED, PLAYTRACK_SEGMENT_ACCOUNT_ID, ...) and may be
overridden with flags.
"""

import logging
import math
import os
import time
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from .config import AnalyticsSettings
from .events import Attribute
from .payload import PayloadError, VideoAttributes
from .player import SimulatedPlayer
from .scheduling import ManualScheduler, SerialDispatcher, ThreadScheduler
from .sinks import ConsoleSink, EventSink, FanOutSink, LoggingSink, RecordingSink, SegmentHttpSink
from .trackers import PlaybackTracker

console = Console()
logger = logging.getLogger("playtrack.cli")


def configure_logging(level: str) -> None:
    handlers = [logging.StreamHandler()]
    log_dir = os.getenv("PLAYTRACK_LOG_DIR")
    if log_dir:
        handlers.append(logging.FileHandler(os.path.join(log_dir, "playtrack.log"), encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def resolve_settings(account_id: Optional[str], enable: bool) -> AnalyticsSettings:
    settings = AnalyticsSettings.from_env()
    overrides = {}
    if account_id:
        overrides["account_id"] = account_id
    if enable:
        overrides["enabled"] = True
    return settings.with_overrides(**overrides) if overrides else settings


def build_sink(kind: str, settings: AnalyticsSettings) -> EventSink:
    if kind == "console":
        return ConsoleSink(console)
    if kind == "log":
        return LoggingSink()
    if kind == "segment":
        if not settings.write_key:
            raise click.ClickException("PLAYTRACK_SEGMENT_WRITE_KEY is required for --sink segment")
        return SegmentHttpSink(settings.write_key, endpoint=settings.endpoint)
    raise click.ClickException(f"Unknown sink: {kind}")


def print_summary(recorder: RecordingSink) -> None:
    table = Table(title="Emitted events", show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=4)
    table.add_column("Event", style="white")
    table.add_column("Position", justify="right")
    table.add_column("Percent", justify="right")
    table.add_column("Live", justify="center")
    for idx, (name, props) in enumerate(recorder.events, start=1):
        table.add_row(
            str(idx),
            name,
            str(props.get(Attribute.VIDEO_CONTENT_POSITION.value, "")),
            str(props.get(Attribute.VIDEO_CONTENT_PERCENT_COMPLETE.value, "")),
            "yes" if props.get(Attribute.LIVESTREAM.value) else "no",
        )
    console.print(table)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--log-level", default=os.getenv("PLAYTRACK_LOG_LEVEL", "WARNING"), show_default=True, help="Logging level")
def main_cli(log_level: str):
    """Track video playback lifecycle analytics."""
    configure_logging(log_level)


@main_cli.command()
@click.option("--duration", type=float, default=60.0, show_default=True, help="Content length in seconds")
@click.option("--start-at", type=float, default=0.0, show_default=True, help="Initial playhead position")
@click.option("--live", is_flag=True, help="Simulate a live stream")
@click.option("--resume", is_flag=True, help="Treat playback as resuming earlier content")
@click.option("--interval", type=float, default=None, help="Heartbeat seconds (env: PLAYTRACK_HEARTBEAT_SECONDS)")
@click.option("--speed", type=float, default=1.0, show_default=True, help="Playback rate")
@click.option("--pause-at", type=float, default=None, help="Pause once the playhead passes this position")
@click.option("--pause-for", type=float, default=10.0, show_default=True, help="Seconds to stay paused")
@click.option("--max-ticks", type=int, default=None, help="Stop after this many heartbeats")
@click.option("--video-id", default="sim-video", show_default=True)
@click.option("--video-name", default="Simulated Video", show_default=True)
@click.option("--sink", "sink_kind", type=click.Choice(["console", "log", "segment"]), default="console", show_default=True)
@click.option("--account-id", default=None, help="Account id (env: PLAYTRACK_SEGMENT_ACCOUNT_ID)")
@click.option("--enable", is_flag=True, help="Enable analytics regardless of PLAYTRACK_SEGMENT_ENABLED")
@click.option("--realtime/--no-realtime", default=False, show_default=True, help="Use wall-clock timers")
def simulate(
    duration: float,
    start_at: float,
    live: bool,
    resume: bool,
    interval: Optional[float],
    speed: float,
    pause_at: Optional[float],
    pause_for: float,
    max_ticks: Optional[int],
    video_id: str,
    video_name: str,
    sink_kind: str,
    account_id: Optional[str],
    enable: bool,
    realtime: bool,
):
    """Run a simulated playback session and report the emitted events."""
    settings = resolve_settings(account_id, enable)
    if not settings.is_enabled:
        raise click.ClickException(
            "Analytics is disabled; set PLAYTRACK_SEGMENT_ENABLED=1 and PLAYTRACK_SEGMENT_ACCOUNT_ID (or pass --enable --account-id)"
        )
    if speed <= 0:
        raise click.ClickException("--speed must be positive")
    interval = interval or settings.heartbeat_interval
    if max_ticks is None:
        if live:
            max_ticks = 10
        else:
            max_ticks = int(math.ceil(max(duration - start_at, 0) / (interval * speed))) + 2
            if pause_at is not None:
                max_ticks += int(math.ceil(pause_for / interval))

    logger.info(
        f"Simulating {'live' if live else f'{duration}s'} playback (interval={interval}s, realtime={realtime})"
    )
    recorder = RecordingSink()
    sink = FanOutSink(build_sink(sink_kind, settings), recorder)
    attributes = VideoAttributes(video_id=video_id, video_name=video_name, duration=None if live else duration)

    if realtime:
        _simulate_realtime(settings, sink, attributes, duration, start_at, live, resume, interval, speed, pause_at, pause_for, max_ticks)
    else:
        _simulate_stepped(settings, sink, attributes, duration, start_at, live, resume, interval, speed, pause_at, pause_for, max_ticks)

    print_summary(recorder)


def _simulate_stepped(settings, sink, attributes, duration, start_at, live, resume, interval, speed, pause_at, pause_for, max_ticks):
    now = [0.0]
    player = SimulatedPlayer(duration, start_at=start_at, live=live, speed=speed, clock=lambda: now[0])
    scheduler = ManualScheduler()
    tracker = PlaybackTracker(sink, settings=settings, scheduler=scheduler, heartbeat_interval=interval)
    try:
        tracker.configure(player, attributes, is_live=live, is_resuming=resume)
    except PayloadError as e:
        raise click.ClickException(str(e))

    player.play()
    tracker.track_start()
    paused = False
    for _ in range(max_ticks):
        if not tracker.is_tracking:
            break
        if pause_at is not None and not paused and player.current_time() >= pause_at:
            paused = True
            player.pause()
            tracker.track_pause()
            now[0] += pause_for
            player.play()
            tracker.track_start()
        now[0] += interval
        scheduler.fire()
    tracker.reset()


def _simulate_realtime(settings, sink, attributes, duration, start_at, live, resume, interval, speed, pause_at, pause_for, max_ticks):
    player = SimulatedPlayer(duration, start_at=start_at, live=live, speed=speed)
    dispatcher = SerialDispatcher()
    tracker = PlaybackTracker(sink, settings=settings, scheduler=ThreadScheduler(), dispatcher=dispatcher, heartbeat_interval=interval)
    try:
        tracker.configure(player, attributes, is_live=live, is_resuming=resume)
    except PayloadError as e:
        raise click.ClickException(str(e))

    player.play()
    tracker.track_start()
    deadline = time.monotonic() + max_ticks * interval + (pause_for if pause_at is not None else 0)
    paused = False
    try:
        while tracker.is_tracking and time.monotonic() < deadline:
            if pause_at is not None and not paused and player.current_time() >= pause_at:
                paused = True
                player.pause()
                tracker.track_pause()
                time.sleep(pause_for)
                player.play()
                tracker.track_start()
            time.sleep(min(0.25, interval))
    except KeyboardInterrupt:
        console.print("Interrupted")
    finally:
        tracker.reset()
        dispatcher.drain()
        dispatcher.shutdown()


@main_cli.command("settings")
def show_settings():
    """Show the analytics settings resolved from the environment."""
    settings = AnalyticsSettings.from_env()
    table = Table(title="Analytics settings", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="dim", width=22)
    table.add_column("Value", style="white")
    table.add_row("Enabled flag", "yes" if settings.enabled else "no")
    table.add_row("Account id", settings.account_id or "(none)")
    table.add_row("Account name", settings.account_name or "(none)")
    table.add_row("Write key", settings.masked_write_key() or "(none)")
    table.add_row("Heartbeat seconds", str(settings.heartbeat_interval))
    table.add_row("Endpoint", settings.endpoint)
    table.add_row("Tracking active", "yes" if settings.is_enabled else "no")
    console.print(table)


def main():
    """Main entry point."""
    main_cli()


if __name__ == "__main__":
    main()
