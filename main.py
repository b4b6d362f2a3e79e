import argparse
import asyncio
import logging
from datetime import timedelta
from pathlib import Path

import config
from api.exceptions import BusinessError
from api.playback import (
    AudioEngineProtocol,
    InMemoryAudioEngine,
    PlaybackOrchestrator,
    RepeatMode,
    StateBroadcaster,
    load_tracks,
)
from di.bootstrap import build_container
from events.playback_events import SessionStateChangedEvent
from utils import format_duration, setup_logging

logger = logging.getLogger("PlaylistSequencer")


class Arguments(argparse.Namespace):
    tracks: Path = config.DEFAULT_TRACKS_FILE
    repeat: RepeatMode = RepeatMode.OFF
    shuffle: bool = False
    sleep: float | None = None
    sleep_preset: int | None = None
    plays: int = 5

    @property
    def sleep_duration(self) -> timedelta | None:
        if self.sleep:
            return timedelta(seconds=self.sleep)
        if self.sleep_preset:
            return timedelta(minutes=self.sleep_preset)
        return None


def _parse_args() -> Arguments:
    parser = argparse.ArgumentParser(
        description="Sequence a playlist on the in-memory audio engine."
    )
    parser.add_argument("-t", "--tracks", type=Path, help="JSON track list to load.")
    parser.add_argument(
        "-r",
        "--repeat",
        type=RepeatMode,
        choices=list(RepeatMode),
        help="Repeat mode to start with.",
    )
    parser.add_argument(
        "-s", "--shuffle", action="store_true", help="Enable shuffle before playing."
    )
    parser.add_argument(
        "--sleep", type=float, help="Arm a sleep timer for this many seconds."
    )
    parser.add_argument(
        "--sleep-preset",
        type=int,
        choices=[int(p.total_seconds() // 60) for p in config.SLEEP_TIMER_PRESETS],
        help="Arm a sleep timer from the presets (minutes).",
    )
    parser.add_argument(
        "-n", "--plays", type=int, help="Number of simulated track completions."
    )
    return parser.parse_args(namespace=Arguments())


async def main() -> None:
    """Main entry point."""
    args = _parse_args()
    setup_logging(config.ENCODING)

    try:
        tracks = load_tracks(args.tracks)
    except BusinessError as e:
        logger.critical("Cannot start: %s", e)
        return
    if not tracks:
        logger.critical("Track list %s is empty", args.tracks)
        return

    with build_container() as container:
        orchestrator = container.resolve(PlaybackOrchestrator)
        broadcaster = container.resolve(StateBroadcaster)
        engine = container.resolve(AudioEngineProtocol)
        if not isinstance(engine, InMemoryAudioEngine):
            raise TypeError("The demo runner needs the in-memory engine")

        last_track_id: str | None = None

        async def log_now_playing(event: SessionStateChangedEvent) -> None:
            nonlocal last_track_id
            snapshot = event.snapshot
            track = snapshot.current_track
            if track is None or track.id == last_track_id:
                return
            last_track_id = track.id
            logger.info(
                "Now playing: %s - %s [%s] (repeat: %s, shuffle: %s, up next: %d)",
                track.title,
                track.subtitle,
                format_duration(track.duration),
                snapshot.repeat_mode,
                snapshot.shuffle_enabled,
                len(snapshot.up_next),
            )

        broadcaster.subscribe(log_now_playing)

        await orchestrator.set_tracks(tracks)
        while broadcaster.snapshot.repeat_mode is not args.repeat:
            await orchestrator.cycle_repeat_mode()
        if args.shuffle:
            await orchestrator.toggle_shuffle_mode()
        if (sleep := args.sleep_duration) is not None:
            await orchestrator.set_sleep_timer(sleep)

        first = broadcaster.snapshot.active_sequence[0]
        await orchestrator.play_track(first)

        for _ in range(args.plays):
            await asyncio.sleep(config.DEMO_TICK_SECONDS)
            if not orchestrator.snapshot.has_session:
                logger.info("Playback ended by sleep timer")
                break
            await engine.complete()

        await orchestrator.stop()
        logger.info("Event bus metrics: %s", orchestrator.broadcaster.event_bus.get_metrics())


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
