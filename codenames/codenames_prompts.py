"""Prompt text for the clue giver and guesser roles."""

from __future__ import annotations

from typing import Sequence

from .codenames_observation import ClueGiverView, GuesserView
from .codenames_state import CLUE_NUMBER_ALL, CLUE_NUMBER_NONE, Role, Turn, UNLIMITED_GUESS_CAP

CLUE_GIVER_SYSTEM_PROMPT = (
    "You are playing Codenames as a Spymaster. Your role is to give one-word clues that help your team "
    "guess several of its words while avoiding the opponent's words, the neutral words and the assassin. "
    "Never use a word that is on the board, or contains one. Try to finish the game as soon as possible."
)

GUESSER_SYSTEM_PROMPT = (
    "You are playing Codenames as a Guesser. Based on your Spymaster's clue, pick the single board word "
    "most likely to belong to your team. Pick exactly one word per answer; you will be asked again for "
    "the next one. You may stop the turn with skip once you have made at least one guess."
)

CLUE_OUTPUT_SCHEMA = (
    "Respond with exactly one JSON object and nothing else, no markdown fences:\n"
    '{ "word": "<one word>", "number": <integer>, "reasoning": "<optional short explanation>" }\n'
    f"`number` is how many of your words the clue relates to. Use {CLUE_NUMBER_NONE} if the clue relates to "
    f"none of them on purpose, or {CLUE_NUMBER_ALL} if it relates to all remaining ones; both give your team "
    "unlimited guesses."
)

GUESS_OUTPUT_SCHEMA = (
    "Respond with exactly one JSON object and nothing else, no markdown fences:\n"
    '{ "words": "<one board word>", "skip": false, "reasoning": "<optional short explanation>" }\n'
    'To end the turn instead, respond { "skip": true, "reasoning": "..." }. '
    "Skipping is only allowed after at least one guess this turn."
)


def system_prompt_for(role: Role) -> str:
    return CLUE_GIVER_SYSTEM_PROMPT if role is Role.CLUE_GIVER else GUESSER_SYSTEM_PROMPT


def summarize_history(history: Sequence[Turn]) -> str:
    """One line per previous turn, with a check or cross per guess."""
    if not history:
        return "(none)"
    lines = []
    for turn in history:
        guesses = ", ".join(
            guess.word if guess.is_skip else f"{guess.word}{'✓' if guess.was_correct else '✗'}"
            for guess in turn.guesses
        )
        lines.append(f'{turn.team.value}: Clue "{turn.clue.word} {turn.clue.number}" -> Guesses: {guesses or "-"}')
    return "\n".join(lines)


def _join(words: Sequence[str]) -> str:
    return ", ".join(words) if words else "(none)"


def build_clue_prompt(view: ClueGiverView) -> str:
    return (
        f"You are the {view.team.value} team's Spymaster.\n\n"
        f"Your words are: {_join(view.own_words)}\n"
        f"Opponent's words are: {_join(view.opponent_words)}\n"
        f"Neutral words are: {_join(view.neutral_words)}\n"
        f"The assassin word is: {_join(view.assassin_words)}\n\n"
        f"Previous turns:\n{summarize_history(view.history)}\n\n"
        "Be creative and take calculated risks: ambitious clues that connect several of your words "
        "win faster.\n\n"
        f"{CLUE_OUTPUT_SCHEMA}\n"
    )


def build_guess_prompt(view: GuesserView) -> str:
    remaining = "unlimited" if view.guesses_remaining >= UNLIMITED_GUESS_CAP else str(view.guesses_remaining)
    return (
        f"You are guessing for the {view.team.value} team.\n\n"
        f"The clue is: {view.clue.word} {view.clue.number}\n"
        f"Available words are: {_join(view.available_words)}\n"
        f"Guesses already made this turn: {_join(view.guesses_this_turn)}\n"
        f"Guesses remaining this turn: {remaining}\n\n"
        f"Previous turns:\n{summarize_history(view.history)}\n\n"
        f"{GUESS_OUTPUT_SCHEMA}\n"
    )


def build_repair_prompt(*, raw_response: str | None, error: str, role: Role) -> str:
    """Follow-up prompt after a response failed validation."""
    schema = CLUE_OUTPUT_SCHEMA if role is Role.CLUE_GIVER else GUESS_OUTPUT_SCHEMA
    return (
        "Your previous answer could not be used.\n"
        f"Error: {error}\n"
        f"Original response:\n{raw_response or '(empty)'}\n\n"
        f"{schema}\n"
    )
