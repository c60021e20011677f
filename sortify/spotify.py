"""
Spotify API integration.

Wraps spotipy with the handful of reads and writes the sorter needs: the
user's own playlists, the tracks of one playlist, single-track playlist
mutations and the liked-songs collection.
"""

from typing import List, Optional, Dict
from dataclasses import dataclass, field
from pathlib import Path
import logging
import time

import spotipy
from spotipy.cache_handler import CacheFileHandler
from spotipy.oauth2 import SpotifyPKCE
from spotipy.exceptions import SpotifyException
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_ID = "9c7a1f7848ba4f5b839b4e199e2ed1a9"
DEFAULT_REDIRECT_URI = "http://localhost:8888/callback"
DEFAULT_TOKEN_CACHE = ".spotify_token_cache.json"


@dataclass
class Track:
    """Represents a track in the source playlist."""
    spotify_id: Optional[str] = None
    name: str = ""
    artists: List[str] = field(default_factory=list)
    preview_url: Optional[str] = None
    image_url: Optional[str] = None

    def artist_names(self) -> str:
        return ", ".join(self.artists)

    def summary(self) -> str:
        """Short "name - artists" form used in prompts."""
        return f"{self.name} - {self.artist_names()}"


@dataclass
class Playlist:
    """Represents a playlist owned by the current user."""
    spotify_id: str
    name: str = ""
    owner_id: str = ""


def log_out(cache_path: str = DEFAULT_TOKEN_CACHE) -> bool:
    """Delete the cached token file.

    Returns:
        True if a token file existed and was removed
    """
    path = Path(cache_path)
    if not path.exists():
        return False
    try:
        path.unlink()
    except OSError as e:
        logger.warning("Could not delete token cache %s: %s", path, e)
        return False
    return True


class SpotifyClient:
    """Client for interacting with Spotify Web API."""

    # Required OAuth scopes
    SCOPES = [
        'playlist-read-private',       # Read private playlists
        'playlist-read-collaborative', # Read collaborative playlists
        'playlist-modify-public',      # Add/remove tracks in public playlists
        'playlist-modify-private',     # Add/remove tracks in private playlists
        'user-library-read',           # Check liked songs
        'user-library-modify',         # Add to liked songs
    ]

    def __init__(self, client_id: str = DEFAULT_CLIENT_ID, redirect_uri: str = DEFAULT_REDIRECT_URI,
                 cache_path: str = DEFAULT_TOKEN_CACHE):
        """Initialize Spotify client.

        Args:
            client_id: Spotify application client ID (PKCE, no secret needed)
            redirect_uri: OAuth redirect URI
            cache_path: Path to token cache file
        """
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.cache_path = cache_path
        self.sp = None  # Will hold spotipy.Spotify instance
        self.auth_manager = None
        self._user = None

    def authenticate(self) -> bool:
        """Authenticate with Spotify using the PKCE flow.

        Returns:
            True if authentication successful, False otherwise
        """
        try:
            self.auth_manager = SpotifyPKCE(
                client_id=self.client_id,
                redirect_uri=self.redirect_uri,
                scope=' '.join(self.SCOPES),
                cache_handler=CacheFileHandler(cache_path=self.cache_path),
                open_browser=True
            )

            self.sp = spotipy.Spotify(auth_manager=self.auth_manager)

            # Test authentication by getting current user
            self._user = self.sp.current_user()
            return self._user is not None

        except (SpotifyException, RequestException) as e:
            logger.error("Authentication failed: %s", e)
            return False

    def _require_auth(self):
        if not self.sp:
            raise RuntimeError("Not authenticated. Call authenticate() first.")

    def current_user(self) -> Dict:
        self._require_auth()
        if self._user is None:
            self._user = self._api_call_with_retry(self.sp.current_user)
        return self._user

    def user_name(self) -> str:
        """Display name of the logged in user, falling back to the user ID."""
        user = self.current_user()
        return user.get('display_name') or user['id']

    def my_playlists(self) -> List[Playlist]:
        """Fetch the playlists owned by the current user.

        Followed playlists owned by someone else are left out since their
        tracks cannot be modified.

        Returns:
            List of Playlist objects in the order Spotify returns them
        """
        self._require_auth()

        user_id = self.current_user()['id']
        playlists = []
        offset = 0
        limit = 50

        while True:
            results = self._api_call_with_retry(
                self.sp.current_user_playlists,
                limit=limit,
                offset=offset
            )

            for item in results['items']:
                if not item:
                    continue
                owner_id = (item.get('owner') or {}).get('id', '')
                if owner_id != user_id:
                    continue
                playlists.append(Playlist(
                    spotify_id=item['id'],
                    name=item['name'],
                    owner_id=owner_id,
                ))

            if not results['next']:
                break
            offset += limit

        return playlists

    def list_tracks(self, playlist_id: str) -> List[Track]:
        """Fetch every track of a playlist.

        Episodes and deleted entries are dropped. Local files are kept with
        an empty ``spotify_id``.

        Args:
            playlist_id: Spotify playlist ID

        Returns:
            List of Track objects
        """
        self._require_auth()

        tracks = []
        offset = 0
        limit = 100

        while True:
            results = self._api_call_with_retry(
                self.sp.playlist_items,
                playlist_id,
                limit=limit,
                offset=offset,
                additional_types=('track',)
            )

            for item in results['items']:
                track_data = item.get('track')
                if not track_data or track_data.get('type', 'track') != 'track':
                    continue
                tracks.append(self._parse_track(track_data))

            if not results['next']:
                break
            offset += limit

        return tracks

    def add_item(self, playlist_id: str, track_id: str) -> bool:
        """Add one track to a playlist.

        Returns:
            True on success, False if Spotify rejected the request
        """
        self._require_auth()
        try:
            self.sp.playlist_add_items(playlist_id, [track_id])
        except (SpotifyException, RequestException) as e:
            logger.warning("Adding %s to playlist %s failed: %s", track_id, playlist_id, e)
            return False
        return True

    def remove_item(self, playlist_id: str, track_id: str) -> bool:
        """Remove every occurrence of a track from a playlist.

        Returns:
            True on success, False if Spotify rejected the request
        """
        self._require_auth()
        try:
            self.sp.playlist_remove_all_occurrences_of_items(playlist_id, [track_id])
        except (SpotifyException, RequestException) as e:
            logger.warning("Removing %s from playlist %s failed: %s", track_id, playlist_id, e)
            return False
        return True

    def get_playlist_name(self, playlist_id: str) -> Optional[str]:
        """Look up a playlist's name, or None if the lookup fails."""
        self._require_auth()
        try:
            playlist = self.sp.playlist(playlist_id, fields="name")
        except (SpotifyException, RequestException) as e:
            logger.warning("Looking up name of playlist %s failed: %s", playlist_id, e)
            return None
        return playlist.get('name')

    def is_track_liked(self, track_id: str) -> bool:
        """Check whether a track is in the user's liked songs.

        A failed check counts as "not liked" so the caller still tries to
        like it.
        """
        self._require_auth()
        try:
            result = self.sp.current_user_saved_tracks_contains([track_id])
        except (SpotifyException, RequestException) as e:
            logger.warning("Checking liked songs for %s failed: %s", track_id, e)
            return False
        return bool(result and result[0])

    def like_track(self, track_id: str) -> bool:
        """Save a track to the user's liked songs.

        Returns:
            True on success, False if Spotify rejected the request
        """
        self._require_auth()
        try:
            self.sp.current_user_saved_tracks_add([track_id])
        except (SpotifyException, RequestException) as e:
            logger.warning("Liking %s failed: %s", track_id, e)
            return False
        return True

    def log_out(self) -> bool:
        """Forget the cached token so the next run asks to log in again."""
        return log_out(self.cache_path)

    def _parse_track(self, track_data: dict) -> Track:
        """Parse Spotify track data into Track object.

        Args:
            track_data: Raw track data from Spotify API

        Returns:
            Track object
        """
        artists = [artist['name'] for artist in track_data.get('artists', []) if artist.get('name')]
        images = (track_data.get('album') or {}).get('images') or []

        return Track(
            spotify_id=track_data.get('id'),
            name=track_data.get('name', ''),
            artists=artists,
            preview_url=track_data.get('preview_url'),
            image_url=images[0]['url'] if images else None,
        )

    def _api_call_with_retry(self, func, *args, max_retries=3, **kwargs):
        """Wrapper for read-only API calls that waits out rate limits.

        Only HTTP 429 responses are retried, honouring Retry-After. Every
        other error is raised to the caller.

        Args:
            func: Function to call
            *args: Positional arguments
            max_retries: Maximum number of attempts
            **kwargs: Keyword arguments

        Returns:
            Function result
        """
        for attempt in range(max_retries):
            try:
                return func(*args, **kwargs)
            except SpotifyException as e:
                if e.http_status != 429 or attempt == max_retries - 1:
                    raise
                retry_after = int((e.headers or {}).get('Retry-After', 1))
                logger.info("Rate limited on %s, waiting %ss", func.__name__, retry_after)
                time.sleep(retry_after)
