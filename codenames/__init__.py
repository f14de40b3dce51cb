"""Codenames package exports."""

from .codenames_board import create_board, find_unrevealed_index, reveal
from .codenames_game import CodenamesGame, guess_budget
from .codenames_moves import ClueGiven, GuessMade, GuessOutcome, GuessResolution, TurnEnded
from .codenames_record import GameRecorder, JsonFileSink, SerializedGame, load_record, to_record
from .codenames_replay import ReplayRun, ReplaySnapshot, SnapshotKind, play_back, replay
from .codenames_state import Card, CardType, Clue, GameState, Guess, GuessProposal, Phase, Role, Team, Turn

__all__ = [
    "Card",
    "CardType",
    "Clue",
    "ClueGiven",
    "CodenamesGame",
    "GameRecorder",
    "GameState",
    "Guess",
    "GuessMade",
    "GuessOutcome",
    "GuessProposal",
    "GuessResolution",
    "JsonFileSink",
    "Phase",
    "ReplayRun",
    "ReplaySnapshot",
    "Role",
    "SerializedGame",
    "SnapshotKind",
    "Team",
    "Turn",
    "TurnEnded",
    "create_board",
    "find_unrevealed_index",
    "guess_budget",
    "load_record",
    "play_back",
    "replay",
    "reveal",
    "to_record",
]
