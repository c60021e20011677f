"""
What the user chose for a track and what came of it.

A MenuOutcome is the raw menu answer (playlist positions, or quit).
A SortDecision is what gets applied to Spotify (playlist IDs, never quit).
A SortResult is what happened, turned into one line of feedback.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Sequence, Tuple

from sortify.spotify import Playlist


class MenuChoice(Enum):
    """Ways out of the track menu."""
    ADD = "add"
    REMOVE = "remove"
    SKIP = "skip"
    QUIT = "quit"


@dataclass(frozen=True)
class MenuOutcome:
    """The user's answer for one track.

    For ADD, `indices` are 0-based positions in the session's target list.
    """
    choice: MenuChoice
    indices: Tuple[int, ...] = ()

    @classmethod
    def add(cls, indices: Iterable[int]) -> "MenuOutcome":
        return cls(MenuChoice.ADD, tuple(indices))

    @property
    def is_quit(self) -> bool:
        return self.choice is MenuChoice.QUIT


REMOVE = MenuOutcome(MenuChoice.REMOVE)
SKIP = MenuOutcome(MenuChoice.SKIP)
QUIT = MenuOutcome(MenuChoice.QUIT)


class TrackAction(Enum):
    """Actions that touch (or deliberately don't touch) Spotify."""
    ADD = "add"
    REMOVE = "remove"
    SKIP = "skip"


@dataclass
class SortDecision:
    """A resolved action with concrete playlist IDs."""
    action: TrackAction
    playlist_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_menu_outcome(cls, outcome: MenuOutcome, targets: Sequence[Playlist],
                          source_playlist_id: str) -> "SortDecision":
        """Resolve menu positions against the target list.

        Raises:
            ValueError: for a quit outcome, which has nothing to apply
        """
        if outcome.choice is MenuChoice.ADD:
            return cls(TrackAction.ADD, [targets[i].spotify_id for i in outcome.indices])
        if outcome.choice is MenuChoice.REMOVE:
            return cls(TrackAction.REMOVE, [source_playlist_id])
        if outcome.choice is MenuChoice.SKIP:
            return cls(TrackAction.SKIP)
        raise ValueError("a request to quit has no sort decision")


@dataclass
class SortResult:
    """Outcome of applying a decision.

    `action` is what was actually applied: a cancelled removal comes back as
    SKIP. `failed_playlists` names every playlist (or "Liked Songs") that
    couldn't be updated; it is empty on success.
    """
    action: TrackAction
    failed_playlists: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_playlists

    @classmethod
    def ok(cls, action: TrackAction) -> "SortResult":
        return cls(action)

    @classmethod
    def add_failure(cls, names: List[str]) -> "SortResult":
        return cls(TrackAction.ADD, list(names))

    @classmethod
    def remove_failure(cls, names: List[str]) -> "SortResult":
        return cls(TrackAction.REMOVE, list(names))
