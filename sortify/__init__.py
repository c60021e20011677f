"""
sortify - Sort the tracks of a Spotify playlist into your other playlists.
"""

__version__ = "0.1.0"
