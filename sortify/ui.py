"""
Terminal UI for a sorting session.

Everything outside the per-track menu: welcome, account check, picking
the source playlist, yes/no questions, feedback lines and goodbye.
"""

from typing import Callable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
import questionary
from questionary import Style

from sortify.actions import SortResult, TrackAction
from sortify.spotify import Playlist, Track
from sortify.terminal import wrap_text_to_screen

BYE = "See you next time ♪♫♪"

QUESTION_STYLE = Style([
    ('qmark', 'fg:#00ff00 bold'),        # Question mark - green
    ('question', 'bold'),                 # Question text
    ('answer', 'fg:#00ff00 bold'),       # Answer - green
    ('pointer', 'fg:#00ffff bold'),      # Pointer - cyan
    ('highlighted', 'fg:#00ffff bold'),  # Highlighted choice - cyan
    ('instruction', 'fg:#888888'),       # Instructions
    ('text', ''),                        # Default text
])


def feedback_message(track: Track, result: SortResult) -> str:
    """One line telling the user what happened to `track`."""
    if not result.success:
        names = ", ".join(result.failed_playlists)
        if result.action is TrackAction.REMOVE:
            return f"Failed to remove {track.name} from: {names}"
        return f"Failed to add {track.name} to: {names}"

    if result.action is TrackAction.ADD:
        return f"Successfully sorted {track.name}"
    if result.action is TrackAction.REMOVE:
        return f"Removed {track.name} from source playlist without sorting it"
    return f"Skipped {track.name}"


class UI:
    """Terminal-based user interface."""

    def __init__(self, console: Optional[Console] = None,
                 read_line: Optional[Callable[[str], str]] = None):
        """Initialize UI.

        Args:
            console: Rich console to draw on
            read_line: Reads one line of input after showing a prompt,
                defaults to the console's input
        """
        self.console = console or Console()
        self.read_line = read_line or self.console.input

    def welcome(self):
        self.console.print(Panel.fit(
            "[bold cyan]♪ Welcome to sortify![/bold cyan]\n\n"
            "Sort the tracks of one playlist into your other playlists,\n"
            "one track at a time.",
            border_style="cyan"
        ))
        self.console.print()

    def confirm_account(self, user_name: str) -> bool:
        """Ask whether the logged in account is the right one."""
        return self.confirm(f"Logged in as [bold]{escape(user_name)}[/bold]. Continue with this account?",
                            default=True)

    def confirm_logout(self) -> bool:
        return self.confirm("Log out so you can sign in with another account next time?", default=True)

    def choose_source(self, playlists: List[Playlist]) -> Optional[int]:
        """Pick the playlist to sort.

        Returns:
            Index into `playlists`, or None if the user cancelled (Ctrl+C)
        """
        choices = [
            questionary.Choice(title=f"{i + 1} - {playlist.name}", value=i)
            for i, playlist in enumerate(playlists)
        ]
        index = questionary.select(
            "Choose source playlist",
            choices=choices,
            style=QUESTION_STYLE,
            instruction="(Use arrow keys to move, ENTER to confirm)"
        ).ask()

        if index is None:
            return None

        self.console.clear()
        self.console.print(f"Source playlist is [bold]{escape(playlists[index].name)}[/bold]")
        self.console.print()
        return index

    def confirmation(self, prompt: str) -> bool:
        """Ask a y/n question until it gets a y or an n."""
        while True:
            self.console.print(escape(wrap_text_to_screen(prompt)))
            self.console.print("y - Confirm")
            self.console.print("n - Cancel")
            self.console.print()
            answer = self.read_line("Choice: ").strip().lower()
            self.console.print()

            if answer == "y":
                return True
            if answer == "n":
                return False
            self.console.print(f"Option {escape(answer)} is invalid, please try again")

    def track_action_feedback(self, track: Track, result: SortResult):
        self.console.clear()
        message = escape(feedback_message(track, result))
        if result.success:
            self.console.print(message)
        else:
            self.console.print(f"[red]{message}[/red]")
        self.console.print()

    def goodbye(self, source_playlist_name: Optional[str] = None):
        if source_playlist_name:
            self.console.print(f"You've sorted all the tracks in {escape(source_playlist_name)}! {BYE}")
        else:
            self.console.print(BYE)

    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask user for yes/no confirmation.

        Args:
            message: Confirmation message
            default: Default value if user just presses Enter

        Returns:
            True if user confirms, False otherwise
        """
        return Confirm.ask(message, default=default, console=self.console)

    def print_error(self, message: str):
        """Print an error message."""
        self.console.print(f"[red]✗ {message}[/red]")

    def print_warning(self, message: str):
        """Print a warning message."""
        self.console.print(f"[yellow]⚠ {message}[/yellow]")
