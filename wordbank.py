"""
Word lists used to spell out IDs.

A WordBank holds the seed-shuffled adjectives and nouns plus their reverse
lookups. It is built once and never mutated; changing either list changes the
meaning of every ID issued before.
"""
import os
import re
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core_logic import (
    logger, ConfigurationError, UnknownAdjectiveError, UnknownNounError
)

WORD_PATTERN = re.compile(r'^[a-z0-9]+$')


def unique(words: Iterable[str]) -> List[str]:
    """Drops empty and repeated words, keeping the first occurrence."""
    seen = set()
    result = []
    for word in words:
        if not word or word in seen:
            continue
        seen.add(word)
        result.append(word)
    return result


def load_word_list(path: str) -> List[str]:
    """Reads one word per line, keeping lowercase alphanumeric entries only."""
    if not os.path.exists(path):
        raise ConfigurationError(f"Word list not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        lines = f.read().split("\n")

    filtered = []
    dropped = 0
    for line in lines:
        word = line.strip().lower()
        if WORD_PATTERN.match(word):
            filtered.append(word)
        elif word:
            dropped += 1

    words = unique(filtered)
    if not words:
        raise ConfigurationError(f"Word list is empty: {path}")
    if dropped:
        logger.warning(f"Dropped {dropped} invalid entries from {path}")
    logger.info(f"Loaded {len(words)} words from {path}")
    return words


def _reverse_map(words: Sequence[str], kind: str) -> Dict[str, int]:
    positions = {word: i for i, word in enumerate(words)}
    if len(positions) != len(words):
        raise ConfigurationError(f"The {kind} list contains duplicate words")
    return positions


@dataclass(frozen=True)
class WordBank:
    adjectives: Tuple[str, ...]
    nouns: Tuple[str, ...]
    adjective_positions: Dict[str, int] = field(repr=False)
    noun_positions: Dict[str, int] = field(repr=False)

    @classmethod
    def build(
        cls,
        adjectives: Sequence[str],
        nouns: Sequence[str],
        rng: Optional[random.Random] = None,
    ) -> "WordBank":
        """
        Copies both lists, shuffling them with rng when one is given
        (adjectives first, then nouns).
        """
        if not adjectives:
            raise ConfigurationError("adjective list is empty")
        if not nouns:
            raise ConfigurationError("noun list is empty")

        shuffled_adjectives = list(adjectives)
        shuffled_nouns = list(nouns)
        if rng is not None:
            rng.shuffle(shuffled_adjectives)
            rng.shuffle(shuffled_nouns)

        return cls(
            adjectives=tuple(shuffled_adjectives),
            nouns=tuple(shuffled_nouns),
            adjective_positions=_reverse_map(shuffled_adjectives, "adjective"),
            noun_positions=_reverse_map(shuffled_nouns, "noun"),
        )

    @property
    def base_a(self) -> int:
        return len(self.adjectives)

    @property
    def base_n(self) -> int:
        return len(self.nouns)

    def is_noun(self, word: str) -> bool:
        return word in self.noun_positions

    def words_for(self, digits: Sequence[int]) -> List[str]:
        """Maps adjective digits plus a trailing noun digit to words."""
        pieces = [self.adjectives[d] for d in digits[:-1]]
        pieces.append(self.nouns[digits[-1]])
        return pieces

    def digits_for(self, tokens: Sequence[str]) -> List[int]:
        """Maps adjective tokens plus a trailing noun token to digits."""
        digits = []
        for token in tokens[:-1]:
            position = self.adjective_positions.get(token)
            if position is None:
                raise UnknownAdjectiveError(token)
            digits.append(position)
        noun = tokens[-1]
        position = self.noun_positions.get(noun)
        if position is None:
            raise UnknownNounError(noun)
        digits.append(position)
        return digits
