"""
The per-track menu.

Shows the track, the grid of target playlists and the key legend, then
reads one line at a time until the user picks add, remove, skip or quit.
Numbers toggle playlists, "u"/"d" change the preview volume; both redraw
the menu and keep asking.
"""

from typing import Callable, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from sortify import actions
from sortify.actions import MenuOutcome
from sortify.art import ImageCache
from sortify.audio import PreviewHandle, PreviewPlayer
from sortify.spotify import Playlist, Track
from sortify.terminal import center_string, string_to_half_screen

LEGEND = [
    "a - Confirm and add to playlists",
    "s - Skip track",
    "r - Remove from source without adding",
    "q - Quit",
]


def toggle_selections(line: str, selected: List[bool]) -> None:
    """Flip every playlist whose 1-based number appears in `line`.

    Tokens that aren't numbers in range are ignored.
    """
    for token in line.split():
        try:
            number = int(token)
        except ValueError:
            continue
        if 1 <= number <= len(selected):
            selected[number - 1] = not selected[number - 1]


class TrackMenu:
    """Interactive menu for one track at a time."""

    def __init__(self, console: Console, read_line: Callable[[str], str],
                 image_cache: ImageCache, player: PreviewPlayer):
        self.console = console
        self.read_line = read_line
        self.image_cache = image_cache
        self.player = player

    def run(self, track: Track, targets: Sequence[Playlist],
            handle: Optional[PreviewHandle] = None) -> MenuOutcome:
        """Loop until the user gives a final answer for `track`.

        Args:
            track: Track being sorted
            targets: Target playlists, numbered from 1 in the menu
            handle: Preview handle, or None when no audio is playing

        Returns:
            The user's MenuOutcome
        """
        selected = [False] * len(targets)

        while True:
            self.render(track, targets, selected, handle)
            line = self.read_line("Choice: ")
            self.console.print()

            outcome = self.handle_input(line, selected, handle)
            if outcome is not None:
                return outcome

            self.console.clear()

    def handle_input(self, line: str, selected: List[bool],
                     handle: Optional[PreviewHandle] = None) -> Optional[MenuOutcome]:
        """Apply one line of input.

        Returns:
            The final outcome, or None if the menu should be shown again
        """
        command = line.strip()

        if command == "r":
            return actions.REMOVE
        if command == "s":
            return actions.SKIP
        if command == "q":
            return actions.QUIT
        if command == "a":
            return MenuOutcome.add(i for i, is_selected in enumerate(selected) if is_selected)
        if command == "u":
            self.player.volume_up(handle)
            return None
        if command == "d":
            self.player.volume_down(handle)
            return None

        toggle_selections(line, selected)
        return None

    def render(self, track: Track, targets: Sequence[Playlist], selected: List[bool],
               handle: Optional[PreviewHandle] = None) -> None:
        self.console.print(self.image_cache.get_or_render(track.image_url))
        self.console.print(f"[bold]{escape(center_string(track.name))}[/bold]")
        self.console.print(f"[italic]{escape(center_string(track.artist_names()))}[/italic]")
        self.console.print()
        self.console.print("Choose playlists to add track to")
        self.console.print()

        self._render_grid(targets, selected)

        self.console.print()
        for line in LEGEND:
            self.console.print(line)

        volume = self.player.current_volume(handle)
        if volume is not None:
            self.console.print(f"u/d - Volume up/down (currently {round(volume * 100)}%)")
        self.console.print()

    def _render_grid(self, targets: Sequence[Playlist], selected: List[bool]) -> None:
        # Two playlists per row
        row = []
        for i, playlist in enumerate(targets):
            if selected[i]:
                cell = string_to_half_screen(f"[✓] {i + 1} - {playlist.name}")
                row.append(f"[green]{escape(cell)}[/green]")
            else:
                row.append(escape(string_to_half_screen(f"{i + 1} - {playlist.name}")))

            if len(row) == 2 or i == len(targets) - 1:
                self.console.print(" ".join(row))
                row = []
