"""
Integer obfuscation for human IDs.

Two layers are available. A Feistel network permutes a power-of-two domain and
can be reversed exactly. An XXTEA-style block transform scrambles the full
64-bit value, but once reduced modulo a domain that does not divide 2**64 it is
no longer injective, so it can only be undone by searching.

Neither layer is cryptographically secure; the keys are public.
"""
from typing import Sequence, Tuple

from mymath import MASK32, MAX_U64

# Multiplier of the Feistel round function.
ROUND_MULTIPLIER = 0x5BD1E995

FEISTEL_ROUNDS = 4

# Golden-ratio constant added to the running sum every XXTEA round.
XXTEA_DELTA = 0x9E3779B9
XXTEA_ROUNDS = 32

DEFAULT_CIPHER_KEY: Tuple[int, int, int, int] = (0x12345678, 0x9ABCDEF0, 0x0FEDCBA9, 0x87654321)


def _mask(bits: int) -> int:
    return (1 << bits) - 1


def feistel_round(right: int, key: int) -> int:
    """Mixes a half block with a round key into a 32-bit value."""
    r = right & MASK32
    rotated = ((r << 16) | (r >> 16)) & MASK32
    return ((r * ROUND_MULTIPLIER + key) ^ rotated) & MASK32


def feistel_permute(value: int, keys: Sequence[int], bits: int) -> int:
    """Applies the Feistel network to a value of the given bit width."""
    half = bits // 2
    left_bits, right_bits = bits - half, half
    left = (value >> right_bits) & _mask(left_bits)
    right = value & _mask(right_bits)
    for key in keys:
        left, right = right, left ^ (feistel_round(right, key) & _mask(left_bits))
        # Halves trade widths when the domain has an odd number of bits
        left_bits, right_bits = right_bits, left_bits
    return (left << right_bits) | right


def feistel_unpermute(value: int, keys: Sequence[int], bits: int) -> int:
    """Reverses feistel_permute for the same keys and bit width."""
    half = bits // 2
    left_bits, right_bits = bits - half, half
    if len(keys) % 2:
        left_bits, right_bits = right_bits, left_bits
    left = (value >> right_bits) & _mask(left_bits)
    right = value & _mask(right_bits)
    for key in reversed(keys):
        left, right = right ^ (feistel_round(left, key) & _mask(right_bits)), left
        left_bits, right_bits = right_bits, left_bits
    return (left << right_bits) | right


def _xxtea_mix(v: int, total: int, key_word: int) -> int:
    shifted = ((v << 4) & MASK32) ^ (v >> 5)
    return (((shifted + v) & MASK32) ^ ((total + key_word) & MASK32)) & MASK32


def xxtea_encrypt64(value: int, key: Sequence[int]) -> int:
    """Runs the 32-round block transform over a 64-bit value."""
    if not 0 <= value <= MAX_U64:
        raise ValueError("Input is out of the 64-bit range.")
    v0 = value & MASK32
    v1 = value >> 32
    total = 0
    for _ in range(XXTEA_ROUNDS):
        total = (total + XXTEA_DELTA) & MASK32
        v0 = (v0 + _xxtea_mix(v1, total, key[total & 3])) & MASK32
        v1 = (v1 + _xxtea_mix(v0, total, key[(total >> 11) & 3])) & MASK32
    return (v1 << 32) | v0


def xxtea_decrypt64(value: int, key: Sequence[int]) -> int:
    """Exact inverse of xxtea_encrypt64 over the full 64-bit space."""
    if not 0 <= value <= MAX_U64:
        raise ValueError("Input is out of the 64-bit range.")
    v0 = value & MASK32
    v1 = value >> 32
    total = (XXTEA_DELTA * XXTEA_ROUNDS) & MASK32
    for _ in range(XXTEA_ROUNDS):
        v1 = (v1 - _xxtea_mix(v0, total, key[(total >> 11) & 3])) & MASK32
        v0 = (v0 - _xxtea_mix(v1, total, key[total & 3])) & MASK32
        total = (total - XXTEA_DELTA) & MASK32
    return (v1 << 32) | v0


def scramble(value: int, key: Sequence[int], max_index: int) -> int:
    """Scrambles a value and reduces it into [0, max_index)."""
    return xxtea_encrypt64(value, key) % max_index
