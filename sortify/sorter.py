"""
Per-track orchestration: preview, menu, Spotify changes, feedback.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Tuple
import logging

from sortify.actions import SortDecision
from sortify.art import ImageCache
from sortify.audio import PreviewPlayer
from sortify.menu import TrackMenu
from sortify.reconciler import PlaylistReconciler
from sortify.spotify import Playlist, Track
from sortify.ui import UI

logger = logging.getLogger(__name__)


class TrackFlow(Enum):
    """What the session should do after a track."""
    CONTINUE = "continue"
    QUIT = "quit"


@dataclass(frozen=True)
class SessionContext:
    """State shared by every track of one session.

    `targets` is fixed at construction: menu selections are positions in it.
    """
    source: Playlist
    targets: Tuple[Playlist, ...]
    image_cache: ImageCache = field(default_factory=ImageCache)

    @classmethod
    def from_playlists(cls, playlists: Iterable[Playlist], source_index: int,
                       image_cache: Optional[ImageCache] = None) -> "SessionContext":
        """Split the user's playlists into the source and the targets."""
        playlists = list(playlists)
        targets = tuple(p for i, p in enumerate(playlists) if i != source_index)
        return cls(playlists[source_index], targets, image_cache or ImageCache())


class TrackSorter:
    """Walks the user through the tracks of the source playlist."""

    def __init__(self, context: SessionContext, player: PreviewPlayer, menu: TrackMenu,
                 reconciler: PlaylistReconciler, ui: UI):
        self.context = context
        self.player = player
        self.menu = menu
        self.reconciler = reconciler
        self.ui = ui

    def handle_track(self, track: Track) -> TrackFlow:
        """Run the full decide-and-apply cycle for one track.

        Returns:
            TrackFlow.QUIT if the user asked to quit, otherwise CONTINUE
        """
        if not track.spotify_id:
            logger.debug("Skipping %r, it has no Spotify ID", track.name)
            return TrackFlow.CONTINUE

        # Preview loads in the background while the menu draws
        handle = self.player.start(track)
        try:
            outcome = self.menu.run(track, self.context.targets, handle)
            if outcome.is_quit:
                logger.info("Quit requested at %s", track.spotify_id)
                return TrackFlow.QUIT

            decision = SortDecision.from_menu_outcome(
                outcome, self.context.targets, self.context.source.spotify_id
            )
            logger.info("Applying %s for %s to %s", decision.action.value, track.spotify_id,
                        decision.playlist_ids)
            result = self.reconciler.apply(decision, track, self.context.source.spotify_id)
            if not result.success:
                logger.warning("Could not update %s for %s", result.failed_playlists, track.spotify_id)
            self.ui.track_action_feedback(track, result)
        finally:
            self.player.stop(handle)

        return TrackFlow.CONTINUE

    def run(self, tracks: Iterable[Track]) -> bool:
        """Handle every track in order.

        Returns:
            True if all tracks were handled, False if the user quit early
        """
        for track in tracks:
            if self.handle_track(track) is TrackFlow.QUIT:
                return False
        return True
