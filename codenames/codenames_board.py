"""Board construction, validation and reveal helpers."""

from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Any, Sequence

from engine.errors import InvalidBoardComposition, InvalidWordCount

from .codenames_state import BOARD_SIZE, STANDARD_COMPOSITION, Card, CardType
from .codenames_words import DEFAULT_WORDS

logger = logging.getLogger(__name__)


def standard_card_types(rng: random.Random | None = None) -> tuple[CardType, ...]:
    """Return the standard 9/8/7/1 composition in uniformly shuffled order."""
    rng = rng or random.Random()
    card_types = [card_type for card_type, count in STANDARD_COMPOSITION.items() for _ in range(count)]
    rng.shuffle(card_types)
    return tuple(card_types)


def deal_words(word_list: Sequence[str] = DEFAULT_WORDS, rng: random.Random | None = None) -> tuple[str, ...]:
    """Pick `BOARD_SIZE` distinct words from `word_list`."""
    rng = rng or random.Random()
    unique_words = list(dict.fromkeys(word.strip() for word in word_list if word.strip()))
    if len(unique_words) < BOARD_SIZE:
        raise InvalidWordCount(
            f"word_list must contain at least {BOARD_SIZE} distinct words.",
            received=len(unique_words),
        )
    return tuple(rng.sample(unique_words, BOARD_SIZE))


def _parse_card_type(raw: Any) -> CardType:
    if isinstance(raw, CardType):
        return raw
    try:
        return CardType(str(raw).strip().lower())
    except ValueError as exc:
        raise InvalidBoardComposition(f"Unknown card type {raw!r}.") from exc


def validate_composition(card_types: Sequence[Any]) -> tuple[CardType, ...]:
    """Parse affiliations and require exactly the standard composition."""
    if len(card_types) != BOARD_SIZE:
        raise InvalidBoardComposition(f"Expected {BOARD_SIZE} card types, received {len(card_types)}.")
    parsed = tuple(_parse_card_type(raw) for raw in card_types)
    counts = Counter(parsed)
    if any(counts.get(card_type, 0) != expected for card_type, expected in STANDARD_COMPOSITION.items()):
        summary = {card_type.value: counts.get(card_type, 0) for card_type in CardType}
        raise InvalidBoardComposition(
            "Invalid color distribution. Need 9 red, 8 blue, 7 neutral and 1 assassin card; "
            f"received {summary}.",
            counts=summary,
        )
    return parsed


def create_board(
    words: Sequence[str],
    card_types: Sequence[Any] | None = None,
    *,
    rng: random.Random | None = None,
) -> tuple[Card, ...]:
    """Build a fresh, fully hidden board.

    With `card_types` the layout is validated and used as-is; without it the
    standard composition is shuffled onto the words using `rng`.
    """
    if len(words) != BOARD_SIZE:
        raise InvalidWordCount(f"A board needs exactly {BOARD_SIZE} words.", received=len(words))
    cleaned = [str(word).strip() for word in words]
    if any(not word for word in cleaned):
        raise InvalidWordCount("Board words cannot be blank.", received=len(words))
    if len({word.lower() for word in cleaned}) != BOARD_SIZE:
        raise InvalidWordCount(f"Board words must be {BOARD_SIZE} unique strings.", received=len(words))

    if card_types is None:
        assigned = standard_card_types(rng)
    else:
        assigned = validate_composition(card_types)

    return tuple(Card(word=word, type=card_type) for word, card_type in zip(cleaned, assigned, strict=True))


def reveal(cards: tuple[Card, ...], index: int) -> tuple[tuple[Card, ...], CardType | None]:
    """Reveal one card.

    Returns the new board and the revealed affiliation. Out-of-range or
    already revealed indices leave the board unchanged and return None.
    """
    if index < 0 or index >= len(cards):
        logger.warning("Ignoring reveal of out-of-range index %d", index)
        return cards, None
    card = cards[index]
    if card.revealed:
        logger.debug("Ignoring reveal of already revealed card %r", card.word)
        return cards, None
    updated = list(cards)
    updated[index] = Card(word=card.word, type=card.type, revealed=True)
    return tuple(updated), card.type


def find_unrevealed_index(cards: Sequence[Card], label: str | None) -> int | None:
    """Case-insensitive exact lookup among unrevealed cards only."""
    if label is None:
        return None
    needle = label.strip().lower()
    if not needle:
        return None
    for index, card in enumerate(cards):
        if not card.revealed and card.word.lower() == needle:
            return index
    return None


def find_index(cards: Sequence[Card], label: str) -> int | None:
    """Case-insensitive lookup regardless of reveal state."""
    needle = label.strip().lower()
    for index, card in enumerate(cards):
        if card.word.lower() == needle:
            return index
    return None
