"""
Mixed-radix conversion and overflow-safe combination counting.

An ID with k adjectives is a number whose least significant digit is the noun
(base = number of nouns) followed by k adjective digits (base = number of
adjectives), written most significant first.
"""
import threading
from typing import Dict, Iterable, List, Sequence

from core_logic import logger

MAX_U64 = (1 << 64) - 1
MASK32 = 0xFFFFFFFF


def count_combinations(base_a: int, base_n: int, adjectives_count: int) -> int:
    """
    Returns base_a ** adjectives_count * base_n, or 0 when the count is invalid
    or the product would not fit in 64 bits.
    """
    if adjectives_count < 1 or base_a < 1 or base_n < 1:
        return 0
    combos = 1
    if base_a > 1:
        for _ in range(adjectives_count):
            if combos > MAX_U64 // base_a:
                return 0
            combos *= base_a
    if combos > MAX_U64 // base_n:
        return 0
    return combos * base_n


class CombinationCounter:
    """Memoized combination counts, safe to share between threads."""

    def __init__(self, base_a: int, base_n: int):
        self.base_a = base_a
        self.base_n = base_n
        self._cache: Dict[int, int] = {}
        self._lock = threading.Lock()

    def combinations(self, adjectives_count: int) -> int:
        if adjectives_count < 1:
            return 0
        cached = self._cache.get(adjectives_count)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._cache.get(adjectives_count)
            if cached is not None:
                return cached
            combos = count_combinations(self.base_a, self.base_n, adjectives_count)
            # Overflow results are not cached
            if combos:
                self._cache[adjectives_count] = combos
                logger.debug(f"Cached {combos} combinations for {adjectives_count} adjectives")
            return combos

    def precompute(self, counts: Iterable[int]) -> Dict[int, int]:
        return {count: self.combinations(count) for count in counts}


def index_to_digits(index: int, adjectives_count: int, base_a: int, base_n: int) -> List[int]:
    """
    Splits a combination index into adjective digits followed by the noun digit.
    """
    if index < 0:
        raise ValueError("Input must be a non-negative integer")
    digits = [0] * (adjectives_count + 1)
    index, digits[adjectives_count] = divmod(index, base_n)
    for i in range(adjectives_count - 1, -1, -1):
        index, digits[i] = divmod(index, base_a)
    if index:
        raise ValueError("Index does not fit in the requested number of digits")
    return digits


def digits_to_index(digits: Sequence[int], base_a: int, base_n: int) -> int:
    """
    Converts adjective digits followed by a noun digit back into an index.
    """
    if len(digits) < 2:
        raise ValueError("Need at least one adjective digit and a noun digit")
    index = 0
    for digit in digits[:-1]:
        index = index * base_a + digit
    return index * base_n + digits[-1]


def is_power_of_two(n: int) -> bool:
    return n != 0 and (n & (n - 1)) == 0


def domain_bits(max_index: int) -> int:
    """Bit width of a power-of-two domain, i.e. log2(max_index)."""
    if not is_power_of_two(max_index):
        raise ValueError("Domain size must be a power of two")
    return max_index.bit_length() - 1
