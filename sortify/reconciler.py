"""
Applies a sort decision to Spotify.

Each playlist mutation is independent: one failure never stops the rest,
and every failure ends up as a playlist name in the SortResult. Spotify
sometimes reports failure for a change that already holds (adding a track
that's already there, removing one that's gone), so a failed call is
checked against the playlist contents before it counts as an error.
"""

from typing import Callable, List
import logging

from requests.exceptions import RequestException
from spotipy.exceptions import SpotifyException

from sortify.actions import SortDecision, SortResult, TrackAction
from sortify.spotify import SpotifyClient, Track

logger = logging.getLogger(__name__)

LIKED_SONGS = "Liked Songs"


class PlaylistReconciler:
    """Turns SortDecisions into Spotify calls."""

    def __init__(self, client: SpotifyClient, confirm: Callable[[str], bool]):
        """Initialize reconciler.

        Args:
            client: Authenticated SpotifyClient (or anything with its interface)
            confirm: Asks the user a yes/no question, True for yes
        """
        self.client = client
        self.confirm = confirm

    def apply(self, decision: SortDecision, track: Track, source_playlist_id: str) -> SortResult:
        """Carry out `decision` for `track`.

        Args:
            decision: What to do
            track: Track being sorted, must have a spotify_id
            source_playlist_id: Playlist the track is being sorted out of

        Returns:
            SortResult with the applied action and any failed playlists
        """
        if decision.action is TrackAction.SKIP:
            return SortResult.ok(TrackAction.SKIP)
        if decision.action is TrackAction.REMOVE:
            return self._remove(track, decision.playlist_ids[0] if decision.playlist_ids else source_playlist_id)
        return self._add(track, decision.playlist_ids, source_playlist_id)

    def _remove(self, track: Track, playlist_id: str) -> SortResult:
        if not self.confirm(f"Do you wish to remove {track.summary()} from the source playlist?"):
            logger.info("Removal of %s cancelled, skipping instead", track.spotify_id)
            return SortResult.ok(TrackAction.SKIP)

        if self.client.remove_item(playlist_id, track.spotify_id):
            return SortResult.ok(TrackAction.REMOVE)

        if not self._in_playlist(track.spotify_id, playlist_id, default=True):
            logger.info("Remove of %s reported failure but it is gone from %s", track.spotify_id, playlist_id)
            return SortResult.ok(TrackAction.REMOVE)

        return SortResult.remove_failure([self._playlist_name(playlist_id)])

    def _add(self, track: Track, playlist_ids: List[str], source_playlist_id: str) -> SortResult:
        track_id = track.spotify_id
        errors = []

        for playlist_id in playlist_ids:
            if self.client.add_item(playlist_id, track_id):
                continue
            if self._in_playlist(track_id, playlist_id, default=False):
                logger.info("Add of %s reported failure but it is already in %s", track_id, playlist_id)
                continue
            errors.append(self._playlist_name(playlist_id))

        # Only after every add was attempted
        if not self.client.remove_item(source_playlist_id, track_id):
            logger.warning("Could not remove %s from source playlist %s", track_id, source_playlist_id)

        if not self.client.is_track_liked(track_id) and not self.client.like_track(track_id):
            errors.append(LIKED_SONGS)

        if errors:
            return SortResult.add_failure(errors)
        return SortResult.ok(TrackAction.ADD)

    def _in_playlist(self, track_id: str, playlist_id: str, default: bool) -> bool:
        """Check playlist contents; `default` is returned if the listing fails."""
        try:
            tracks = self.client.list_tracks(playlist_id)
        except (SpotifyException, RequestException) as e:
            logger.warning("Could not list playlist %s to verify %s: %s", playlist_id, track_id, e)
            return default
        return any(t.spotify_id == track_id for t in tracks)

    def _playlist_name(self, playlist_id: str) -> str:
        return self.client.get_playlist_name(playlist_id) or f"Playlist with ID {playlist_id}"
