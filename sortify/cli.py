"""
Command-line interface for sortify.

Loads configuration, logs in to Spotify and runs one sorting session.
"""

import warnings
# Suppress urllib3 OpenSSL warning on macOS
warnings.filterwarnings('ignore', message='urllib3 v2 only supports OpenSSL 1.1.1+')

import click
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from requests.exceptions import RequestException
from spotipy.exceptions import SpotifyException

from sortify import __version__
from sortify.art import ImageCache
from sortify.audio import PreviewPlayer
from sortify.logger import setup_logging
from sortify.menu import TrackMenu
from sortify.reconciler import PlaylistReconciler
from sortify.sorter import SessionContext, TrackSorter
from sortify.spotify import (
    SpotifyClient,
    DEFAULT_CLIENT_ID,
    DEFAULT_REDIRECT_URI,
    DEFAULT_TOKEN_CACHE,
    log_out,
)
from sortify.ui import UI

logger = logging.getLogger(__name__)

console = Console()


@dataclass
class Config:
    """Runtime settings, read from the environment."""
    client_id: str = DEFAULT_CLIENT_ID
    redirect_uri: str = DEFAULT_REDIRECT_URI
    token_cache: str = DEFAULT_TOKEN_CACHE
    log_dir: str = "logs"
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            client_id=os.environ.get('SPOTIFY_CLIENT_ID', DEFAULT_CLIENT_ID),
            redirect_uri=os.environ.get('SPOTIFY_REDIRECT_URI', DEFAULT_REDIRECT_URI),
            token_cache=os.environ.get('SORTIFY_TOKEN_CACHE', DEFAULT_TOKEN_CACHE),
            log_dir=os.environ.get('SORTIFY_LOG_DIR', 'logs'),
            debug=os.environ.get('DEBUG', '').lower() in ('1', 'true', 'yes'),
        )


def get_config_dir() -> Path:
    """Get sortify configuration directory."""
    return Path(os.environ.get('SORTIFY_CONFIG_DIR', Path.home() / '.sortify'))


def load_env_file():
    """Load environment variables from .env file if it exists."""
    env_file = get_config_dir() / '.env'
    if env_file.exists():
        load_dotenv(env_file)


def get_spotify_client(config: Config) -> SpotifyClient:
    """Get authenticated Spotify client."""
    client = SpotifyClient(config.client_id, config.redirect_uri, config.token_cache)

    if not client.authenticate():
        console.print("[red]Error: Spotify authentication failed[/red]")
        console.print("Delete the token cache with 'sortify logout' and try again")
        sys.exit(1)

    return client


def abort_session(ui: UI, message: str, error: Exception):
    """Report a failed Spotify read, say goodbye and exit with status 1."""
    logger.error("%s: %s", message, error)
    ui.print_error(f"{message}: {escape(str(error))}")
    ui.goodbye()
    sys.exit(1)


def run_session(config: Config, ui: UI, client: SpotifyClient = None):
    """Log in, pick the source playlist and sort its tracks."""
    ui.welcome()

    if client is None:
        client = get_spotify_client(config)
    try:
        playlists = client.my_playlists()
    except (SpotifyException, RequestException) as e:
        abort_session(ui, "Could not load your playlists", e)

    if not ui.confirm_account(client.user_name()):
        if ui.confirm_logout() and client.log_out():
            logger.info("Logged out, token cache removed")
        ui.goodbye()
        return

    if len(playlists) < 2:
        ui.print_warning("You need at least two playlists of your own to sort between.")
        ui.goodbye()
        return

    source_index = ui.choose_source(playlists)
    if source_index is None:
        ui.goodbye()
        return

    context = SessionContext.from_playlists(playlists, source_index, ImageCache())
    logger.info("Set source playlist, ID is %s", context.source.spotify_id)

    try:
        tracks = client.list_tracks(context.source.spotify_id)
    except (SpotifyException, RequestException) as e:
        abort_session(ui, f"Could not load the tracks of {context.source.name}", e)
    logger.info("Loaded %d tracks from source playlist", len(tracks))

    logger.info("Initializing audio player")
    player = PreviewPlayer()

    sorter = TrackSorter(
        context,
        player,
        TrackMenu(ui.console, ui.read_line, context.image_cache, player),
        PlaylistReconciler(client, ui.confirmation),
        ui,
    )

    try:
        finished = sorter.run(tracks)
    finally:
        player.shutdown()

    ui.goodbye(context.source.name if finished else None)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option('--debug', is_flag=True, help='Write debug-level logs')
@click.option('--logout', 'logout_flag', is_flag=True, help='Forget the cached Spotify login and exit')
@click.pass_context
def cli(ctx, debug, logout_flag):
    """sortify - Sort a Spotify playlist into your other playlists.

    Listen to a preview of each track, tick the playlists it belongs in,
    and sortify adds it there and removes it from the source playlist.
    """
    load_env_file()
    config = Config.from_env()
    config.debug = config.debug or debug

    ctx.ensure_object(dict)
    ctx.obj['config'] = config

    if logout_flag:
        ctx.invoke(logout)
        ctx.exit()

    if ctx.invoked_subcommand is None:
        ctx.invoke(sort)


@cli.command()
@click.pass_context
def sort(ctx):
    """Sort the tracks of a playlist (the default command)."""
    config = ctx.obj['config']
    log_path = setup_logging(config.log_dir, config.debug)
    logger.info("Initialized sortify, logging to %s", log_path)

    ui = UI(console)
    try:
        run_session(config, ui)
    except KeyboardInterrupt:
        console.print()
        ui.goodbye()


@cli.command()
@click.pass_context
def logout(ctx):
    """Forget the cached Spotify login."""
    config = ctx.obj['config']
    if log_out(config.token_cache):
        console.print("[green]✓ Logged out[/green]")
    else:
        console.print("[dim]No cached login found[/dim]")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == '__main__':
    main()
