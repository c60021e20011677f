#!/usr/bin/env python3
"""Test script for the Spotify client, using a stand-in for spotipy."""

from spotipy.exceptions import SpotifyException
from requests.exceptions import ConnectionError as RequestsConnectionError

from sortify.spotify import SpotifyClient, Track, Playlist, log_out


def _track_data(track_id, name="Song", preview=None, images=None, artists=("Artist",)):
    return {
        'id': track_id,
        'name': name,
        'type': 'track',
        'preview_url': preview,
        'artists': [{'name': a} for a in artists],
        'album': {'images': images if images is not None else [{'url': 'https://img/1'}]},
    }


class FakeSpotipy:
    """Minimal spotipy.Spotify replacement."""

    def __init__(self):
        self.playlist_pages = []
        self.item_pages = {}
        self.fail_add = None
        self.fail_remove = None
        self.fail_name = None
        self.liked = set()
        self.calls = []
        self.rate_limited = 0

    def current_user(self):
        return {'id': 'me', 'display_name': 'Me Myself'}

    def current_user_playlists(self, limit=50, offset=0):
        self.calls.append(('current_user_playlists', offset))
        return self.playlist_pages[offset // limit]

    def playlist_items(self, playlist_id, limit=100, offset=0, additional_types=('track',)):
        self.calls.append(('playlist_items', playlist_id, offset))
        if self.rate_limited:
            self.rate_limited -= 1
            raise SpotifyException(429, -1, "rate limited", headers={'Retry-After': '0'})
        return self.item_pages[playlist_id][offset // limit]

    def playlist_add_items(self, playlist_id, items):
        self.calls.append(('add', playlist_id, items))
        if self.fail_add:
            raise self.fail_add

    def playlist_remove_all_occurrences_of_items(self, playlist_id, items):
        self.calls.append(('remove', playlist_id, items))
        if self.fail_remove:
            raise self.fail_remove

    def playlist(self, playlist_id, fields=None):
        if self.fail_name:
            raise self.fail_name
        return {'name': f"Name of {playlist_id}"}

    def current_user_saved_tracks_contains(self, tracks):
        return [t in self.liked for t in tracks]

    def current_user_saved_tracks_add(self, tracks):
        self.calls.append(('like', tracks))
        self.liked.update(tracks)


def _client():
    client = SpotifyClient(cache_path="unused.json")
    client.sp = FakeSpotipy()
    return client


def test_track_model():
    """Test Track data model helpers."""
    print("Testing: Track data model...")

    track = Track(spotify_id="123", name="Get Lucky", artists=["Daft Punk", "Pharrell Williams"])

    assert track.artist_names() == "Daft Punk, Pharrell Williams"
    assert track.summary() == "Get Lucky - Daft Punk, Pharrell Williams"
    assert Track().spotify_id is None

    print("✓ Track data model works!")


def test_client_initialization():
    """Test SpotifyClient initialization."""
    print("Testing: Client initialization...")

    client = SpotifyClient(client_id="test_id", redirect_uri="http://localhost:8888/callback")

    assert client.client_id == "test_id"
    assert client.sp is None  # Not authenticated yet
    assert client.cache_path == ".spotify_token_cache.json"

    try:
        client.my_playlists()
        assert False, "Expected RuntimeError before authentication"
    except RuntimeError:
        pass

    print("✓ Client initialization works!")


def test_my_playlists_only_owned():
    """Followed playlists owned by other users are left out, across pages."""
    print("Testing: Owned playlists...")

    client = _client()
    client.sp.playlist_pages = [
        {'items': [
            {'id': 'p1', 'name': 'Mine', 'owner': {'id': 'me'}},
            {'id': 'p2', 'name': 'Theirs', 'owner': {'id': 'someone'}},
        ], 'next': 'page2'},
        {'items': [
            {'id': 'p3', 'name': 'Also mine', 'owner': {'id': 'me'}},
        ], 'next': None},
    ]

    playlists = client.my_playlists()

    assert playlists == [
        Playlist(spotify_id='p1', name='Mine', owner_id='me'),
        Playlist(spotify_id='p3', name='Also mine', owner_id='me'),
    ]
    assert client.user_name() == 'Me Myself'

    print("✓ Owned playlists work!")


def test_list_tracks_parses_and_filters():
    """Deleted entries and episodes are dropped, local files keep no ID."""
    print("Testing: Playlist tracks...")

    client = _client()
    episode = _track_data('ep1')
    episode['type'] = 'episode'
    local = _track_data(None, name="Local file", images=[])
    client.sp.item_pages['src'] = [
        {'items': [{'track': _track_data('t1', preview='https://p/1')}, {'track': None}], 'next': 'more'},
        {'items': [{'track': episode}, {'track': local}], 'next': None},
    ]

    tracks = client.list_tracks('src')

    assert [t.spotify_id for t in tracks] == ['t1', None]
    assert tracks[0].preview_url == 'https://p/1'
    assert tracks[0].image_url == 'https://img/1'
    assert tracks[1].image_url is None

    print("✓ Playlist tracks work!")


def test_rate_limited_reads_are_retried():
    """A 429 on a read is waited out and retried."""
    print("Testing: Rate limit handling...")

    client = _client()
    client.sp.rate_limited = 1
    client.sp.item_pages['src'] = [{'items': [{'track': _track_data('t1')}], 'next': None}]

    tracks = client.list_tracks('src')

    assert [t.spotify_id for t in tracks] == ['t1']
    assert client.sp.calls.count(('playlist_items', 'src', 0)) == 2

    print("✓ Rate limit handling works!")


def test_mutations_report_failure():
    """Mutation errors become False and are not retried."""
    print("Testing: Mutation failures...")

    client = _client()
    assert client.add_item('p1', 't1') is True
    assert client.remove_item('p1', 't1') is True

    client.sp.fail_add = SpotifyException(403, -1, "forbidden")
    client.sp.fail_remove = RequestsConnectionError("offline")

    assert client.add_item('p1', 't1') is False
    assert client.remove_item('p1', 't1') is False
    assert [c[0] for c in client.sp.calls] == ['add', 'remove', 'add', 'remove']

    print("✓ Mutation failures work!")


def test_playlist_name_and_liked_songs():
    """Name lookups fall back to None, liking adds to the saved tracks."""
    print("Testing: Playlist names and liked songs...")

    client = _client()
    assert client.get_playlist_name('p1') == 'Name of p1'
    client.sp.fail_name = SpotifyException(404, -1, "not found")
    assert client.get_playlist_name('p1') is None

    assert client.is_track_liked('t1') is False
    assert client.like_track('t1') is True
    assert client.is_track_liked('t1') is True

    print("✓ Playlist names and liked songs work!")


def test_log_out(tmp_path):
    """Logging out deletes the token cache file."""
    print("Testing: Log out...")

    cache = tmp_path / "token.json"
    cache.write_text("{}")

    assert log_out(str(cache)) is True
    assert not cache.exists()
    assert log_out(str(cache)) is False

    print("✓ Log out works!")


if __name__ == '__main__':
    import pathlib
    import tempfile

    print("=" * 60)
    print("Spotify Client Tests")
    print("=" * 60)

    test_track_model()
    test_client_initialization()
    test_my_playlists_only_owned()
    test_list_tracks_parses_and_filters()
    test_rate_limited_reads_are_retried()
    test_mutations_report_failure()
    test_playlist_name_and_liked_songs()
    with tempfile.TemporaryDirectory() as tmp:
        test_log_out(pathlib.Path(tmp))

    print("\n✓ All tests passed!")
