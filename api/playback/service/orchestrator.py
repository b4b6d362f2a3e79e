from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

from api.exceptions import EngineError
from api.playback.models import (
    PlaybackResult,
    PlaybackResultStatus,
    PlaybackSession,
    PlaybackSnapshot,
    ProcessingState,
    RepeatMode,
    Track,
    TrackId,
)
from api.playback.playlist import PlaylistStore, RepeatModeController, ShuffleController
from api.playback.protocols import AudioEngineProtocol
from api.playback.service.broadcaster import StateBroadcaster
from api.playback.service.sleep_timer import SleepTimer

logger = logging.getLogger(__name__)


class PlaybackOrchestrator:
    """Decides what the engine plays next.

    The orchestrator is the only writer of the current track, repeat mode and
    shuffle flag. Every command and every completion is processed under one
    ``asyncio.Lock`` so engine commands never interleave. Snapshot changes
    made under the lock reach observers once it is released.
    """

    def __init__(
        self,
        engine: AudioEngineProtocol,
        playlist: PlaylistStore,
        repeat: RepeatModeController,
        shuffle: ShuffleController,
        broadcaster: StateBroadcaster,
        sleep_timer: SleepTimer,
    ) -> None:
        self.engine = engine
        self.playlist = playlist
        self.repeat = repeat
        self.shuffle = shuffle
        self.broadcaster = broadcaster
        self.sleep_timer = sleep_timer

        self._session: PlaybackSession | None = None
        self._lock = asyncio.Lock()

    # --- Read side ---

    @property
    def session(self) -> PlaybackSession | None:
        return self._session

    @property
    def current_track(self) -> Track | None:
        return self._session.track if self._session else None

    @property
    def snapshot(self) -> PlaybackSnapshot:
        return self.broadcaster.snapshot

    def up_next(self) -> tuple[Track, ...]:
        """Tracks after the current one in the active sequence."""
        current = self.current_track
        return self.playlist.up_next(
            current.id if current else None, self.shuffle.enabled
        )

    def _stage(self, **extra: Any) -> PlaybackSnapshot:
        return self.broadcaster.stage(
            current_track=self.current_track,
            repeat_mode=self.repeat.mode,
            repeated_once=self.repeat.repeated_once,
            shuffle_enabled=self.shuffle.enabled,
            up_next=self.up_next(),
            active_sequence=self.playlist.active_sequence(self.shuffle.enabled),
            **extra,
        )

    async def _mirror(self, **changes: Any) -> None:
        """Record engine-driven changes, delivering them now if no command runs."""
        self.broadcaster.stage(**changes)
        if not self._lock.locked():
            await self.broadcaster.flush()

    @asynccontextmanager
    async def _command(self) -> AsyncIterator[None]:
        async with self._lock:
            yield
        await self.broadcaster.flush()

    # --- Commands ---

    async def set_tracks(self, tracks: Iterable[Track]) -> PlaybackResult[int]:
        """Replace the playlist."""
        async with self._command():
            self.playlist.load(tracks)
            current = self.current_track
            if current is not None and current not in self.playlist:
                logger.warning(
                    "Current track %s is not part of the new playlist", current.id
                )
            self._stage()
            return PlaybackResult(
                PlaybackResultStatus.SUCCESS, "Playlist loaded", data=len(self.playlist)
            )

    async def play_track(self, track: Track) -> PlaybackResult[Track]:
        """Explicitly select and play a track."""
        async with self._command():
            return await self._play(track)

    async def play_next(self) -> PlaybackResult[Track]:
        async with self._command():
            return await self._skip(forward=True)

    async def play_previous(self) -> PlaybackResult[Track]:
        async with self._command():
            return await self._skip(forward=False)

    async def toggle_play_pause(self) -> PlaybackResult[bool]:
        async with self._command():
            if self._session is None:
                return PlaybackResult(PlaybackResultStatus.FAILURE, "Nothing loaded")
            try:
                if self.engine.is_playing:
                    await self.engine.pause()
                else:
                    await self.engine.play()
            except EngineError as e:
                return await self._engine_failure(e)
            playing = self.engine.is_playing
            return PlaybackResult(
                PlaybackResultStatus.SUCCESS,
                "Resumed" if playing else "Paused",
                data=playing,
            )

    async def seek(self, position: timedelta) -> PlaybackResult[timedelta]:
        async with self._command():
            session = self._session
            if session is None:
                return PlaybackResult(PlaybackResultStatus.FAILURE, "Nothing loaded")
            position = max(position, timedelta())
            if session.duration is not None:
                position = min(position, session.duration)
            try:
                await self.engine.seek(position)
            except EngineError as e:
                return await self._engine_failure(e)
            session.position = position
            self._stage(position=position)
            return PlaybackResult(PlaybackResultStatus.SUCCESS, "Seeked", data=position)

    async def stop(self) -> PlaybackResult[None]:
        async with self._command():
            return await self._stop()

    async def cycle_repeat_mode(self) -> PlaybackResult[RepeatMode]:
        async with self._command():
            previous = self.repeat.mode
            mode = self.repeat.cycle()
            self.repeat.repeated_once = False
            logger.debug("Repeat mode %s -> %s", previous, mode)

            if self._session is not None:
                try:
                    await self.engine.set_loop_mode(mode.loop_mode)
                except EngineError as e:
                    return await self._engine_failure(e)

            self._stage()
            return PlaybackResult(
                PlaybackResultStatus.SUCCESS, "Repeat updated", data=mode
            )

    async def toggle_shuffle_mode(self) -> PlaybackResult[bool]:
        async with self._command():
            enabled = self.shuffle.toggle()
            logger.debug("Shuffle %s", "enabled" if enabled else "disabled")
            self._stage()
            return PlaybackResult(
                PlaybackResultStatus.SUCCESS, "Shuffle updated", data=enabled
            )

    async def set_sleep_timer(self, duration: timedelta) -> PlaybackResult[timedelta]:
        async with self._command():
            self.sleep_timer.arm(
                duration, self._on_sleep_timer_expired, self._on_sleep_timer_tick
            )
            self._stage(sleep_timer_remaining=duration)
            return PlaybackResult(
                PlaybackResultStatus.SUCCESS, "Sleep timer set", data=duration
            )

    async def cancel_sleep_timer(self) -> PlaybackResult[None]:
        async with self._command():
            cancelled = self.sleep_timer.cancel()
            self._stage(sleep_timer_remaining=None)
            if not cancelled:
                return PlaybackResult(PlaybackResultStatus.FAILURE, "No sleep timer")
            return PlaybackResult(PlaybackResultStatus.SUCCESS, "Sleep timer cancelled")

    # --- Engine input ---

    async def handle_track_completed(
        self, track_id: TrackId | None = None
    ) -> PlaybackResult[Track]:
        """React to the engine reaching the end of the current media.

        ``track_id`` names the source that completed. A completion for a track
        that is no longer current (replaced while the completion waited for
        the lock) is dropped.
        """
        async with self._command():
            track = self.current_track
            if track is None:
                logger.debug("Completion received without an active session")
                return PlaybackResult(PlaybackResultStatus.FAILURE, "No active session")
            if track_id is not None and track_id != track.id:
                logger.debug(
                    "Dropping completion of %s, %s is current now", track_id, track.id
                )
                return PlaybackResult(PlaybackResultStatus.FAILURE, "Stale completion")

            logger.debug("Track %s completed (repeat: %s)", track.id, self.repeat.mode)
            match self.repeat.mode:
                case RepeatMode.REPEAT_CURRENT:
                    return await self._play(track, internal=True)
                case RepeatMode.REPEAT_ONCE if not self.repeat.repeated_once:
                    self.repeat.repeated_once = True
                    return await self._play(track, internal=True)
                case RepeatMode.REPEAT_ONCE:
                    self.repeat.repeated_once = False
                    self.repeat.mode = RepeatMode.OFF
                case _:
                    pass

            next_track = self.playlist.next(track.id, self.shuffle.enabled)
            if next_track is None:
                logger.warning(
                    "No track follows %s in the active sequence, staying idle", track.id
                )
                self._stage()
                return PlaybackResult(PlaybackResultStatus.FAILURE, "No next track")
            return await self._play(next_track, internal=True)

    async def handle_engine_error(self, message: str) -> None:
        """Record an engine failure reported outside of a command."""
        logger.error("Audio engine error: %s", message)
        if self._session is not None:
            self._session.error = message
            self._session.is_playing = False
        await self._mirror(error=message, is_playing=False)

    async def sync_playback_state(
        self,
        playing: bool,
        processing_state: ProcessingState,
        track_id: TrackId | None = None,
    ) -> None:
        """Mirror the engine playing flag and processing state."""
        session = self._session
        if session is None:
            await self._mirror(is_playing=False, processing_state=processing_state)
            return
        if track_id is not None and track_id != session.track.id:
            logger.debug("Ignoring %s state of replaced track %s", processing_state, track_id)
            return
        session.is_playing = playing
        session.processing_state = processing_state
        await self._mirror(is_playing=playing, processing_state=processing_state)

    async def sync_position(self, position: timedelta) -> None:
        if self._session is None:
            return
        self._session.position = position
        await self._mirror(position=position)

    async def sync_duration(self, duration: timedelta | None) -> None:
        if self._session is None:
            return
        self._session.duration = duration
        await self._mirror(duration=duration)

    def dispose(self) -> None:
        self.sleep_timer.cancel()

    # --- Internals (lock held) ---

    async def _play(self, track: Track, *, internal: bool = False) -> PlaybackResult[Track]:
        """Load and start ``track``.

        ``internal`` marks a reload issued by the orchestrator itself (repeat
        replay or completion advance) which must not cancel repeat-once.
        """
        current = self.current_track
        changed = current is None or current.id != track.id
        if changed:
            if not internal and self.repeat.mode is RepeatMode.REPEAT_ONCE:
                logger.debug("Manual track change cancels pending repeat-once")
                self.repeat.mode = RepeatMode.OFF
            self.repeat.repeated_once = False

        if self._session is None:
            self._session = PlaybackSession(track=track)
        else:
            self._session.track = track
            self._session.position = timedelta()
            self._session.duration = None
            self._session.error = None
        self._stage(position=timedelta(), duration=None, error=None)

        logger.debug("Playing %s (repeat: %s)", track.id, self.repeat.mode)
        try:
            await self.engine.set_loop_mode(self.repeat.mode.loop_mode)
            await self.engine.set_source(track)
            await self.engine.play()
        except EngineError as e:
            return await self._engine_failure(e, track)

        self._stage()
        return PlaybackResult(PlaybackResultStatus.SUCCESS, "Playing", data=track)

    async def _skip(self, *, forward: bool) -> PlaybackResult[Track]:
        current = self.current_track
        if current is None:
            return PlaybackResult(PlaybackResultStatus.FAILURE, "Nothing is playing")

        if self.repeat.mode is RepeatMode.REPEAT_ONCE:
            logger.debug("Manual skip cancels pending repeat-once")
            self.repeat.mode = RepeatMode.OFF
        self.repeat.repeated_once = False

        if forward:
            target = self.playlist.next(current.id, self.shuffle.enabled)
        else:
            target = self.playlist.previous(current.id, self.shuffle.enabled)

        if target is None:
            logger.debug("No %s track for %s", "next" if forward else "previous", current.id)
            self._stage()
            return PlaybackResult(
                PlaybackResultStatus.FAILURE,
                "No next track" if forward else "No previous track",
            )
        return await self._play(target)

    async def _stop(self) -> PlaybackResult[None]:
        was_active = self._session is not None
        self.sleep_timer.cancel()
        self.repeat.reset()
        self._session = None

        if was_active:
            try:
                await self.engine.stop()
            except EngineError:
                logger.exception("Engine failed to stop cleanly")

        self.broadcaster.reset(
            shuffle_enabled=self.shuffle.enabled,
            active_sequence=self.playlist.active_sequence(self.shuffle.enabled),
        )
        if not was_active:
            return PlaybackResult(PlaybackResultStatus.FAILURE, "Nothing to stop")
        logger.info("Playback stopped")
        return PlaybackResult(PlaybackResultStatus.SUCCESS, "Stopped")

    async def _engine_failure[T](
        self, error: EngineError, track: Track | None = None
    ) -> PlaybackResult[T]:
        logger.exception(
            "Engine command %s failed%s",
            error.command or "?",
            f" for track {track.id}" if track else "",
        )
        if self._session is not None:
            self._session.error = error.user_message
            self._session.is_playing = False
        self._stage(error=error.user_message, is_playing=False)
        return PlaybackResult(PlaybackResultStatus.ERROR, error.user_message)

    # --- Sleep timer callbacks ---

    async def _on_sleep_timer_tick(self, remaining: timedelta) -> None:
        await self._mirror(sleep_timer_remaining=remaining)

    async def _on_sleep_timer_expired(self) -> None:
        async with self._command():
            if self._session is None:
                logger.info("Sleep timer expired with no active session")
                self.broadcaster.stage(sleep_timer_remaining=None)
                return
            logger.info("Sleep timer expired, stopping playback")
            await self._stop()
