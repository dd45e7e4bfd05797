"""Shared fixtures: a scripted BrainMatch host and a deterministic clock."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from brainmatch_analytics.core.clock import ManualClock
from brainmatch_analytics.integration import BrainMatchIntegration
from brainmatch_analytics.sink import InMemorySink


@dataclass
class FakeCard:
    """A flipped card exposing DOM-style ``data-*`` attributes."""

    dataset: dict[str, Any] = field(default_factory=dict)


def make_card(value: str | None = None, match: str | None = None) -> FakeCard:
    dataset: dict[str, Any] = {}
    if value is not None:
        dataset["value"] = value
    if match is not None:
        dataset["match"] = match
    return FakeCard(dataset=dataset)


@dataclass
class FakeGameState:
    flipped_cards: list[FakeCard] = field(default_factory=list)
    current_campaign_level: int = 1
    turns: int = 0


class FakeBrainMatchGame:
    """Stand-in for the game: every operation logs its call and returns a marker."""

    def __init__(self) -> None:
        self.game_state = FakeGameState()
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.alerts: list[str] = []

    def start_game(self, level):
        self.calls.append(("start_game", (level,)))
        self.game_state.current_campaign_level = level
        self.game_state.turns = 0
        return f"started:{level}"

    def start_reflex_mode(self):
        self.calls.append(("start_reflex_mode", ()))
        self.game_state.turns = 0
        return "reflex"

    def handle_correct_match(self):
        self.calls.append(("handle_correct_match", ()))
        self.game_state.turns += 1
        self.game_state.flipped_cards = []
        return "correct"

    def handle_incorrect_match(self):
        self.calls.append(("handle_incorrect_match", ()))
        self.game_state.turns += 1
        self.game_state.flipped_cards = []
        return "incorrect"

    def handle_campaign_win(self):
        self.calls.append(("handle_campaign_win", ()))
        return "won"

    def handle_reflex_mode_end(self):
        self.calls.append(("handle_reflex_mode_end", ()))
        return "reflex_done"

    def start_timer(self, duration):
        self.calls.append(("start_timer", (duration,)))
        return f"timer:{duration}"

    def alert(self, message):
        self.alerts.append(message)
        return None

    def calculate_xp(self, level, turns):
        return level * 100 - turns

    def calculate_campaign_stars(self, level, turns):
        return 3 if turns <= 4 else 1

    def calculate_reflex_stars(self, turns):
        return 2

    # -- scripting helpers ---------------------------------------------------

    def flip(self, first: FakeCard, second: FakeCard) -> None:
        self.game_state.flipped_cards = [first, second]


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=1_700_000_000_000)


@pytest.fixture
def sink() -> InMemorySink:
    return InMemorySink()


@pytest.fixture
def game() -> FakeBrainMatchGame:
    return FakeBrainMatchGame()


@pytest.fixture
def integration(sink: InMemorySink, clock: ManualClock) -> BrainMatchIntegration:
    return BrainMatchIntegration(sink, clock=clock, id_provider=lambda ts: f"session_{ts}_test")


@pytest.fixture
def attached(integration: BrainMatchIntegration, game: FakeBrainMatchGame) -> FakeBrainMatchGame:
    """The fake game with analytics attached."""
    integration.attach(game)
    return game
