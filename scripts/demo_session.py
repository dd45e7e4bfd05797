"""Play a scripted BrainMatch session with analytics attached.

Drives a minimal stand-in game through a campaign win, a timed-out
campaign level and a reflex run, then prints the submitted reports.

Usage:
    uv run python scripts/demo_session.py [--settings analytics.json] [--out reports.jsonl]
"""

from __future__ import annotations

import argparse
from pathlib import Path

from brainmatch_analytics import BrainMatchIntegration, InMemorySink, JsonlReportSink, load_settings
from brainmatch_analytics.config import configure_logging
from brainmatch_analytics.core.clock import ManualClock


class Card:
    def __init__(self, value: str, match: str) -> None:
        self.dataset = {"value": value, "match": match}


class GameState:
    def __init__(self) -> None:
        self.flipped_cards: list[Card] = []
        self.current_campaign_level = 1
        self.turns = 0


class DemoGame:
    """Just enough of the game surface for the hooks to observe."""

    def __init__(self) -> None:
        self.game_state = GameState()

    def start_game(self, level: int) -> None:
        self.game_state.current_campaign_level = level
        self.game_state.turns = 0

    def start_reflex_mode(self) -> None:
        self.game_state.turns = 0

    def handle_correct_match(self) -> None:
        self.game_state.turns += 1
        self.game_state.flipped_cards = []

    def handle_incorrect_match(self) -> None:
        self.game_state.turns += 1
        self.game_state.flipped_cards = []

    def handle_campaign_win(self) -> None:
        pass

    def handle_reflex_mode_end(self) -> None:
        pass

    def start_timer(self, duration: int) -> None:
        pass

    def alert(self, message: str) -> None:
        print(f"  [game alert] {message}")

    def calculate_xp(self, level: int, turns: int) -> int:
        return max(0, level * 50 - turns * 2)

    def calculate_campaign_stars(self, level: int, turns: int) -> int:
        return 3 if turns <= level + 2 else 2 if turns <= level * 2 + 2 else 1


def play(game: DemoGame, clock: ManualClock) -> None:
    # Campaign level 1: two good matches and one miss, then a win
    game.start_game(1)
    game.start_timer(60)
    for first, second, correct in [
        (Card("3+4", "7"), Card("7", "3+4"), True),
        (Card("2x5", "10"), Card("9", "3x3"), False),
        (Card("2x5", "10"), Card("10", "2x5"), True),
    ]:
        clock.advance(1_800)
        game.game_state.flipped_cards = [first, second]
        if correct:
            game.handle_correct_match()
        else:
            game.handle_incorrect_match()
    game.handle_campaign_win()

    # Campaign level 2: the timer runs out
    game.start_game(2)
    game.start_timer(45)
    clock.advance(45_000)
    game.alert("Time's Up! Try again.")

    # Reflex mode
    game.start_reflex_mode()
    clock.advance(20_000)
    game.game_state.turns = 14
    game.handle_reflex_mode_end()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--settings", type=Path, default=None, help="JSON settings file")
    parser.add_argument("--out", type=Path, default=None, help="append reports to this JSONL file")
    args = parser.parse_args()

    settings = load_settings(args.settings)
    configure_logging(settings.log_level)

    out = args.out or settings.report_path
    sink = JsonlReportSink(out) if out else InMemorySink()
    clock = ManualClock(start=1_700_000_000_000)
    analytics = BrainMatchIntegration(sink, settings, clock=clock)

    game = DemoGame()
    analytics.attach(game)
    play(game, clock)
    analytics.detach()

    if isinstance(sink, InMemorySink):
        print(f"\nSession {analytics.session_id}: {len(sink.envelopes)} report(s)")
        for envelope in sink.envelopes:
            print(envelope.model_dump_json(indent=2))
    else:
        print(f"\nReports appended to {out}")


if __name__ == "__main__":
    main()
