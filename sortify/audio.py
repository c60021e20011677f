"""
Looping audio previews.

A preview is downloaded and started on a background thread so the track
menu can render straight away. Every failure along the way (no audio
device, no preview URL, download or decode error) just means no preview.
"""

from dataclasses import dataclass, field
from io import BytesIO
from typing import Callable, Optional
import logging
import os
import threading

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame
import requests

from sortify.spotify import Track

logger = logging.getLogger(__name__)

VOLUME_STEP = 0.1
MIN_VOLUME = 0.0
MAX_VOLUME = 1.0


def fetch_preview(url: str, timeout: float = 10) -> bytes:
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


@dataclass
class PreviewHandle:
    """Playback of one track's preview, from start until stop."""
    track_id: str
    url: str
    stopped: threading.Event = field(default_factory=threading.Event)
    playing: bool = False
    thread: Optional[threading.Thread] = None

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the background load has finished (or given up)."""
        if self.thread is not None:
            self.thread.join(timeout)


class PreviewPlayer:
    """Plays one looping preview at a time through the pygame mixer."""

    def __init__(self, volume: float = MAX_VOLUME, mixer=None,
                 fetch: Callable[[str], bytes] = fetch_preview):
        self.mixer = mixer if mixer is not None else pygame.mixer
        self.volume = volume
        self._fetch = fetch
        self._lock = threading.Lock()
        self._ready = False
        self._init()

    def _init(self) -> None:
        try:
            self.mixer.init()
            self._ready = True
        except pygame.error as e:
            logger.warning("Failed to initialize audio player: %s", e)
            self._ready = False

    def is_ready(self) -> bool:
        return self._ready

    def start(self, track: Track) -> Optional[PreviewHandle]:
        """Start looping the track's preview in the background.

        Returns:
            A handle for volume control and stopping, or None when no
            preview can be played
        """
        if not self._ready:
            return None
        if not track.preview_url:
            logger.info("No preview available for %s", track.spotify_id)
            return None

        handle = PreviewHandle(track_id=track.spotify_id, url=track.preview_url)
        handle.thread = threading.Thread(
            target=self._load_and_play,
            args=(handle,),
            name=f"preview-{track.spotify_id}",
            daemon=True,
        )
        handle.thread.start()
        return handle

    def _load_and_play(self, handle: PreviewHandle) -> None:
        try:
            data = self._fetch(handle.url)
        except requests.RequestException as e:
            logger.warning("Preview download failed for %s: %s", handle.track_id, e)
            return

        with self._lock:
            # Track was dismissed while downloading
            if handle.stopped.is_set():
                return
            try:
                self.mixer.music.load(BytesIO(data), "mp3")
                self.mixer.music.set_volume(self.volume)
                self.mixer.music.play(loops=-1)
            except pygame.error as e:
                logger.warning("Preview playback failed for %s: %s", handle.track_id, e)
                return
            handle.playing = True

    def stop(self, handle: Optional[PreviewHandle]) -> None:
        """Stop the preview. Safe before the download finished and on repeat calls."""
        if handle is None:
            return
        with self._lock:
            if handle.stopped.is_set():
                return
            handle.stopped.set()
            if not handle.playing:
                return
            handle.playing = False
            try:
                self.mixer.music.stop()
                self.mixer.music.unload()
            except pygame.error as e:
                logger.warning("Stopping preview for %s failed: %s", handle.track_id, e)

    def volume_up(self, handle: Optional[PreviewHandle]) -> None:
        self._change_volume(handle, VOLUME_STEP)

    def volume_down(self, handle: Optional[PreviewHandle]) -> None:
        self._change_volume(handle, -VOLUME_STEP)

    def _change_volume(self, handle: Optional[PreviewHandle], step: float) -> None:
        if handle is None:
            return
        with self._lock:
            self.volume = round(min(MAX_VOLUME, max(MIN_VOLUME, self.volume + step)), 2)
            if handle.playing:
                try:
                    self.mixer.music.set_volume(self.volume)
                except pygame.error as e:
                    logger.warning("Setting volume failed: %s", e)

    def current_volume(self, handle: Optional[PreviewHandle]) -> Optional[float]:
        if handle is None:
            return None
        return self.volume

    def shutdown(self) -> None:
        if not self._ready:
            return
        try:
            self.mixer.quit()
        except pygame.error as e:
            logger.warning("Audio shutdown failed: %s", e)
        self._ready = False
