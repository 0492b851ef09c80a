"""
Encodes 64-bit integer IDs as hyphen-joined word sequences and back.

An ID with k adjectives reads ``adj-...-adj-noun[-suffix]``. The words spell a
combination index in mixed radix and the optional decimal suffix (1-99)
multiplies the domain by 100, so the encodable range for k adjectives is
``[0, combinations(k) * 100)``.

``encode``/``decode`` are an exact bijection on that range. ``encode_scrambled``
hides sequential structure with a block transform that is not injective after
reduction, so ``decode_from_scrambled`` searches the domain for the first
matching preimage.
"""
import re
import random
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence, Tuple

import config
from core_logic import (
    logger, ConfigurationError, CombinationOverflowError, FormatError,
    IndexOutOfRangeError, InvalidAdjectiveCountError, SearchExhaustedError,
)
from mymath import (
    MAX_U64, CombinationCounter, digits_to_index, domain_bits, index_to_digits,
    is_power_of_two,
)
from obfuscation import (
    DEFAULT_CIPHER_KEY, FEISTEL_ROUNDS, feistel_permute, feistel_unpermute, scramble,
)
from wordbank import WordBank, load_word_list

SEPARATOR = "-"

# Number of suffix values, 0 (not rendered) through 99.
SUFFIX_RANGE = 100

_SUFFIX_PATTERN = re.compile(r'[0-9]+')


def split_suffix(tokens: List[str], word_bank: WordBank) -> Tuple[List[str], int]:
    """
    Separates a trailing numeric suffix from the word tokens.

    A last token that is a known noun is never a suffix, even if it looks
    numeric. Otherwise a run of digits is taken as the suffix. Anything else is
    left in place and fails later as an unknown noun.
    """
    last = tokens[-1]
    if word_bank.is_noun(last):
        return tokens, 0
    if _SUFFIX_PATTERN.fullmatch(last):
        return tokens[:-1], int(last)
    return tokens, 0


def render(pieces: Sequence[str], suffix: int) -> str:
    result = SEPARATOR.join(pieces)
    if suffix > 0:
        result = f"{result}{SEPARATOR}{suffix}"
    return result


class Generator:
    """Bijective and scrambled conversion between integers and human IDs."""

    def __init__(
        self,
        adjectives: Sequence[str],
        nouns: Sequence[str],
        seed: Optional[int] = None,
        cipher_key: Optional[Sequence[int]] = None,
        *,
        nondeterministic: bool = False,
        shuffle: bool = True,
        precompute: Iterable[int] = (),
    ):
        if nondeterministic:
            rng = random.Random()
        elif seed is None:
            raise ConfigurationError("a seed is required unless nondeterministic=True")
        else:
            rng = random.Random(seed)

        self.word_bank = WordBank.build(adjectives, nouns, rng if shuffle else None)
        self.round_keys: Tuple[int, ...] = tuple(rng.getrandbits(64) for _ in range(FEISTEL_ROUNDS))
        self._cipher_key = self._check_cipher_key(cipher_key)
        self.counter = CombinationCounter(self.word_bank.base_a, self.word_bank.base_n)
        self.counter.precompute(precompute)

        logger.info(
            f"Generator ready: {self.word_bank.base_a} adjectives, {self.word_bank.base_n} nouns, "
            f"{'non-deterministic' if nondeterministic else 'seeded'} order"
        )

    @staticmethod
    def _check_cipher_key(cipher_key: Optional[Sequence[int]]) -> Tuple[int, int, int, int]:
        if cipher_key is None:
            return DEFAULT_CIPHER_KEY
        key = tuple(cipher_key)
        if len(key) != 4 or any(not isinstance(w, int) or not 0 <= w <= 0xFFFFFFFF for w in key):
            raise ConfigurationError("cipher key must be four 32-bit unsigned integers")
        return key

    @property
    def cipher_key(self) -> Tuple[int, int, int, int]:
        return self._cipher_key

    def max_combinations(self, adjectives_count: int) -> int:
        """Word combinations for exactly adjectives_count adjectives; 0 if invalid or overflowing."""
        return self.counter.combinations(adjectives_count)

    def _domain(self, adjectives_count: int) -> Tuple[int, int]:
        if adjectives_count < 1:
            raise InvalidAdjectiveCountError(adjectives_count)
        base_combos = self.max_combinations(adjectives_count)
        if base_combos == 0 or base_combos > MAX_U64 // SUFFIX_RANGE:
            raise CombinationOverflowError(adjectives_count)
        return base_combos, base_combos * SUFFIX_RANGE

    def domain_size(self, adjectives_count: int) -> int:
        """Number of encodable values for adjectives_count adjectives."""
        return self._domain(adjectives_count)[1]

    # --- Rendering and parsing ---

    def _to_human_id(self, value: int, base_combos: int, adjectives_count: int) -> str:
        suffix, combo_index = divmod(value, base_combos)
        digits = index_to_digits(combo_index, adjectives_count, self.word_bank.base_a, self.word_bank.base_n)
        return render(self.word_bank.words_for(digits), suffix)

    def _from_human_id(self, human_id: str) -> Tuple[int, int, int]:
        """Returns the encoded value, the domain size and the adjective count."""
        tokens = human_id.split(SEPARATOR)
        if len(tokens) < 2:
            raise FormatError("ID must have at least one adjective and one noun")
        tokens, suffix = split_suffix(tokens, self.word_bank)
        adjectives_count = len(tokens) - 1
        if adjectives_count < 1:
            raise FormatError("ID must have at least one adjective and one noun")

        base_combos, max_index = self._domain(adjectives_count)
        digits = self.word_bank.digits_for(tokens)
        value = suffix * base_combos + digits_to_index(digits, self.word_bank.base_a, self.word_bank.base_n)
        if value >= max_index:
            raise IndexOutOfRangeError(value, max_index)
        return value, max_index, adjectives_count

    # --- Bijective path ---

    def _permute(self, index: int, max_index: int) -> int:
        if is_power_of_two(max_index):
            return feistel_permute(index, self.round_keys, domain_bits(max_index))
        return index

    def _unpermute(self, value: int, max_index: int) -> int:
        if is_power_of_two(max_index):
            return feistel_unpermute(value, self.round_keys, domain_bits(max_index))
        return value

    def encode(self, index: int, adjectives_count: int) -> str:
        """Converts an index into a human-readable ID."""
        base_combos, max_index = self._domain(adjectives_count)
        if not 0 <= index < max_index:
            raise IndexOutOfRangeError(index, max_index)
        return self._to_human_id(self._permute(index, max_index), base_combos, adjectives_count)

    def decode(self, human_id: str) -> int:
        """Converts an ID produced by encode back into its index."""
        value, max_index, _ = self._from_human_id(human_id)
        return self._unpermute(value, max_index)

    # --- Scrambled path ---

    def encode_scrambled(self, index: int, adjectives_count: int) -> str:
        """Scrambles an index with the block transform and encodes the result."""
        base_combos, max_index = self._domain(adjectives_count)
        if not 0 <= index < max_index:
            raise IndexOutOfRangeError(index, max_index)
        scrambled = scramble(index, self._cipher_key, max_index)
        return self._to_human_id(scrambled, base_combos, adjectives_count)

    def scrambled_domain_size(self, human_id: str) -> int:
        """Domain a decode_from_scrambled call for human_id would search."""
        return self._from_human_id(human_id)[1]

    def decode_from_scrambled(self, human_id: str) -> int:
        """
        Finds the smallest index whose scrambled value matches the ID.

        The reduction is not injective, so for colliding inputs this returns a
        preimage that may differ from the index originally encoded. Cost grows
        linearly with the domain size.
        """
        target, max_index, adjectives_count = self._from_human_id(human_id)
        logger.debug(f"Searching {max_index} candidates for {human_id!r}")
        for candidate in range(max_index):
            if scramble(candidate, self._cipher_key, max_index) == target:
                return candidate
        logger.warning(f"No preimage found for {human_id!r} with {adjectives_count} adjectives")
        raise SearchExhaustedError(f"could not decode scrambled value {human_id!r}")


@lru_cache()
def get_generator() -> Generator:
    """
    Returns a cached, singleton Generator built from the configured word lists.
    """
    return Generator(
        load_word_list(config.ADJECTIVES_FILE),
        load_word_list(config.NOUNS_FILE),
        seed=config.SEED,
        cipher_key=config.parse_cipher_key(config.CIPHER_KEY_RAW),
        nondeterministic=config.NONDETERMINISTIC,
        precompute=config.PRECOMPUTE_ADJECTIVE_COUNTS,
    )


def encode_id(n: int, adjectives_count: Optional[int] = None) -> str:
    """Encodes an integer with the default generator."""
    return get_generator().encode(n, config.DEFAULT_ADJECTIVES if adjectives_count is None else adjectives_count)


def decode_id(s: str) -> int:
    """Decodes an ID produced by encode_id."""
    return get_generator().decode(s)
