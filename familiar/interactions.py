"""Bounded rolling history of feed/play/visit events."""
from typing import Iterator, List

from familiar.models import ACTION_FEED, ACTION_PLAY, ACTION_VISIT, Interaction, PetState

MAX_INTERACTIONS = 5
LONELINESS_WINDOW_SECONDS = 24 * 60 * 60


def append_interaction(history: List[Interaction], interaction: Interaction, limit=MAX_INTERACTIONS) -> List[Interaction]:
    """Add ``interaction`` and evict the oldest records beyond ``limit``."""
    history = history + [interaction]
    if len(history) > limit:
        history = history[-limit:]
    return history


def record_interaction(state: PetState, action: str, now: float):
    """Append to the history matching ``action`` and stamp the matching last-* field."""
    interaction = Interaction(time=now, action=action)
    if action == ACTION_FEED:
        state.last_feeds = append_interaction(state.last_feeds, interaction); state.last_fed = now
    elif action == ACTION_PLAY:
        state.last_plays = append_interaction(state.last_plays, interaction); state.last_played = now
    elif action == ACTION_VISIT:
        state.last_visits = append_interaction(state.last_visits, interaction); state.last_visited = now
    else:
        raise ValueError(f"unknown interaction: {action}")


def all_interactions(state: PetState) -> Iterator[Interaction]:
    yield from state.last_visits
    yield from state.last_feeds
    yield from state.last_plays


def count_recent(state: PetState, now: float, window=LONELINESS_WINDOW_SECONDS) -> int:
    """Interactions of every kind strictly newer than ``now - window``."""
    cutoff = now - window
    return sum(1 for i in all_interactions(state) if i.time > cutoff)
