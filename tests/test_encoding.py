import os
import sys
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor

import pytest

# Add the project root to sys.path to resolve module imports correctly
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import encoding
from core_logic import (
    CombinationOverflowError, ConfigurationError, FormatError, IndexOutOfRangeError,
    InvalidAdjectiveCountError, SearchExhaustedError, UnknownAdjectiveError, UnknownNounError,
)
from encoding import Generator, decode_id, encode_id, get_generator, render, split_suffix
from mymath import index_to_digits
from obfuscation import DEFAULT_CIPHER_KEY, scramble

ADJECTIVES = ["quick", "slow"]
NOUNS = ["fox", "dog", "cat"]


@pytest.fixture
def generator():
    """Generator keeping the given word order."""
    return Generator(ADJECTIVES, NOUNS, seed=1, shuffle=False)


@pytest.fixture
def shuffled_generator():
    adjectives = [f"adj{i}" for i in range(9)]
    nouns = [f"noun{i}" for i in range(7)]
    return Generator(adjectives, nouns, seed=12345)


# ===================================
# 1. Construction
# ===================================

def test_seed_is_required():
    with pytest.raises(ConfigurationError):
        Generator(ADJECTIVES, NOUNS)


def test_nondeterministic_opt_in():
    gen = Generator(ADJECTIVES, NOUNS, nondeterministic=True)
    assert sorted(gen.word_bank.adjectives) == sorted(ADJECTIVES)
    assert gen.decode(gen.encode(42, 1)) == 42


def test_seed_zero_is_an_ordinary_seed():
    adjectives = [f"a{i}" for i in range(30)]
    first = Generator(adjectives, NOUNS, seed=0)
    second = Generator(adjectives, NOUNS, seed=0)
    assert first.word_bank.adjectives == second.word_bank.adjectives
    assert first.round_keys == second.round_keys


def test_round_keys_are_64_bit():
    gen = Generator(ADJECTIVES, NOUNS, seed=99)
    assert len(gen.round_keys) == 4
    assert all(0 <= key < 2 ** 64 for key in gen.round_keys)


def test_empty_lists_are_rejected():
    with pytest.raises(ConfigurationError):
        Generator([], NOUNS, seed=1)
    with pytest.raises(ConfigurationError):
        Generator(ADJECTIVES, [], seed=1)


def test_cipher_key_default_and_validation():
    assert Generator(ADJECTIVES, NOUNS, seed=1).cipher_key == DEFAULT_CIPHER_KEY
    assert Generator(ADJECTIVES, NOUNS, seed=1, cipher_key=[1, 2, 3, 4]).cipher_key == (1, 2, 3, 4)
    with pytest.raises(ConfigurationError):
        Generator(ADJECTIVES, NOUNS, seed=1, cipher_key=(1, 2, 3))
    with pytest.raises(ConfigurationError):
        Generator(ADJECTIVES, NOUNS, seed=1, cipher_key=(1, 2, 3, 2 ** 32))


def test_precompute_fills_cache():
    gen = Generator(ADJECTIVES, NOUNS, seed=1, precompute=range(1, 4))
    assert gen.counter._cache == {1: 6, 2: 12, 3: 24}


# ===================================
# 2. Combinations and Domain
# ===================================

def test_max_combinations(generator):
    assert generator.max_combinations(1) == 6
    assert generator.domain_size(1) == 600
    assert generator.max_combinations(0) == 0
    assert generator.max_combinations(-1) == 0


def test_max_combinations_overflow(generator):
    """2**63 * 3 does not fit in 64 bits."""
    assert generator.max_combinations(62) == 3 * 2 ** 62
    assert generator.max_combinations(63) == 0


def test_suffix_multiplier_overflow(generator):
    """The words fit but a hundred suffixes on top of them do not."""
    with pytest.raises(CombinationOverflowError):
        generator.encode(0, 62)
    with pytest.raises(CombinationOverflowError):
        generator.encode(0, 63)
    assert generator.encode(0, 50).count("-") == 50


def test_encode_rejects_bad_arguments(generator):
    with pytest.raises(InvalidAdjectiveCountError):
        generator.encode(0, 0)
    with pytest.raises(IndexOutOfRangeError):
        generator.encode(600, 1)
    with pytest.raises(IndexOutOfRangeError):
        generator.encode(-1, 1)
    with pytest.raises(IndexOutOfRangeError):
        generator.encode_scrambled(600, 1)


# ===================================
# 3. Bijective Encoding
# ===================================

def test_concrete_examples(generator):
    assert generator.encode(0, 1) == "quick-fox"
    assert generator.decode("quick-fox") == 0
    assert generator.encode(6, 1) == "quick-fox-1"
    assert generator.decode("quick-fox-1") == 6
    assert generator.encode(5, 1) == "slow-cat"
    assert generator.encode(599, 1) == "slow-cat-99"


def test_roundtrip_whole_domain(generator, shuffled_generator):
    """Every index of a small domain survives an encode/decode cycle."""
    for gen, adjectives_count in ((generator, 1), (generator, 2), (shuffled_generator, 1)):
        seen = set()
        for index in range(gen.domain_size(adjectives_count)):
            human_id = gen.encode(index, adjectives_count)
            assert gen.decode(human_id) == index
            seen.add(human_id)
        assert len(seen) == gen.domain_size(adjectives_count)


def test_roundtrip_domain_edges(shuffled_generator):
    for adjectives_count in (1, 3, 8, 15):
        max_index = shuffled_generator.domain_size(adjectives_count)
        for index in (0, 1, max_index // 2, max_index - 2, max_index - 1):
            human_id = shuffled_generator.encode(index, adjectives_count)
            assert len(human_id.split("-")) in (adjectives_count + 1, adjectives_count + 2)
            assert shuffled_generator.decode(human_id) == index


def test_suffix_is_omitted_below_one_block(generator):
    for index in range(generator.max_combinations(1)):
        tokens = generator.encode(index, 1).split("-")
        assert len(tokens) == 2
        assert not tokens[-1].isdigit()


def test_suffix_roundtrip(generator):
    base = generator.max_combinations(1)
    for suffix in (1, 2, 57, 99):
        for combo_index in (0, 4):
            index = suffix * base + combo_index
            human_id = generator.encode(index, 1)
            assert human_id.endswith(f"-{suffix}")
            assert generator.decode(human_id) == index


def test_explicit_zero_suffix_is_accepted(generator):
    assert generator.decode("slow-dog-0") == generator.decode("slow-dog")


def test_encoding_is_independent_of_round_keys_without_power_of_two_domain():
    """Domains that are not a power of two are mapped without scrambling."""
    first = Generator(ADJECTIVES, NOUNS, seed=1, shuffle=False)
    second = Generator(ADJECTIVES, NOUNS, seed=2, shuffle=False)
    assert first.round_keys != second.round_keys
    for index in range(600):
        suffix, combo_index = divmod(index, 6)
        plain = render(first.word_bank.words_for(index_to_digits(combo_index, 1, 2, 3)), suffix)
        assert first.encode(index, 1) == second.encode(index, 1) == plain


@pytest.mark.parametrize("nouns", [["x", "y"], ["w", "x", "y", "z"]])
def test_power_of_two_domain_uses_feistel(monkeypatch, nouns):
    """With 64 suffixes the domain is a power of two and gets permuted."""
    monkeypatch.setattr(encoding, "SUFFIX_RANGE", 64)
    gen = Generator(["a", "b"], nouns, seed=3, shuffle=False)
    other = Generator(["a", "b"], nouns, seed=4, shuffle=False)
    max_index = gen.domain_size(1)
    assert max_index in (256, 512)

    encoded = [gen.encode(index, 1) for index in range(max_index)]
    assert len(set(encoded)) == max_index
    assert [gen.decode(h) for h in encoded] == list(range(max_index))
    # Different round keys give a different permutation
    assert encoded != [other.encode(index, 1) for index in range(max_index)]


# ===================================
# 4. Decoding Errors and Disambiguation
# ===================================

@pytest.mark.parametrize("human_id", ["", "quick", "fox", "7", "quick-7"])
def test_decode_too_few_tokens(generator, human_id):
    with pytest.raises(FormatError):
        generator.decode(human_id)


def test_decode_unknown_words(generator):
    with pytest.raises(UnknownAdjectiveError):
        generator.decode("purple-fox")
    with pytest.raises(UnknownNounError):
        generator.decode("quick-wolf")
    with pytest.raises(UnknownNounError):
        generator.decode("quick-abc")
    with pytest.raises(UnknownAdjectiveError):
        generator.decode("quick--fox")


@pytest.mark.parametrize("human_id", ["quick-fox-1\n", "quick-fox-1 ", "quick-fox-١"])
def test_decode_rejects_malformed_suffix(generator, human_id):
    """Only a token made entirely of ASCII digits counts as a suffix."""
    tokens, suffix = split_suffix(human_id.split("-"), generator.word_bank)
    assert suffix == 0
    assert len(tokens) == 3
    # The token stays in the word list, so "fox" is read as an adjective
    with pytest.raises(UnknownAdjectiveError):
        generator.decode(human_id)
    with pytest.raises(UnknownNounError):
        generator.decode(human_id.replace("fox", "slow"))


def test_decode_suffix_out_of_range(generator):
    with pytest.raises(IndexOutOfRangeError):
        generator.decode("quick-fox-100")
    with pytest.raises(IndexOutOfRangeError):
        generator.decode("quick-fox-99999999999999999999999")


def test_decode_overflowing_adjective_count(generator):
    with pytest.raises(CombinationOverflowError):
        generator.decode("-".join(["quick"] * 70 + ["fox"]))


def test_numeric_noun_takes_precedence_over_suffix():
    """A noun that looks like a number is always read as the noun."""
    gen = Generator(["quick", "slow"], ["fox", "42"], seed=1, shuffle=False)
    assert gen.encode(1, 1) == "quick-42"
    assert gen.decode("quick-42") == 1
    assert split_suffix(["quick", "42"], gen.word_bank) == (["quick", "42"], 0)
    assert split_suffix(["quick", "fox", "42"], gen.word_bank) == (["quick", "fox", "42"], 0)
    assert split_suffix(["quick", "fox", "7"], gen.word_bank) == (["quick", "fox"], 7)

    # The same rule makes a numeric noun followed by an equal suffix unreadable
    human_id = gen.encode(42 * 4 + 1, 1)
    assert human_id == "quick-42-42"
    with pytest.raises(UnknownAdjectiveError):
        gen.decode(human_id)


def test_concurrent_encode_decode(shuffled_generator):
    indices = list(range(0, shuffled_generator.domain_size(3), 997))
    expected = [shuffled_generator.encode(i, 3) for i in indices]

    def roundtrip(index):
        human_id = shuffled_generator.encode(index, 3)
        return human_id, shuffled_generator.decode(human_id)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(roundtrip, indices))

    assert [h for h, _ in results] == expected
    assert [i for _, i in results] == indices


# ===================================
# 5. Scrambled Encoding
# ===================================

def test_scrambled_ids_are_not_sequential(generator):
    scrambled = [generator.encode_scrambled(i, 1) for i in range(20)]
    plain = [generator.encode(i, 1) for i in range(20)]
    assert scrambled != plain


def test_scrambled_decode_returns_a_matching_preimage(generator):
    """Decoding may return another index, but one that scrambles to the same value."""
    max_index = generator.domain_size(1)
    for index in range(0, max_index, 29):
        human_id = generator.encode_scrambled(index, 1)
        decoded = generator.decode_from_scrambled(human_id)
        assert scramble(decoded, generator.cipher_key, max_index) == scramble(index, generator.cipher_key, max_index)
        assert decoded <= index
        assert generator.encode_scrambled(decoded, 1) == human_id


def test_scrambled_decode_returns_smallest_colliding_index(generator):
    max_index = generator.domain_size(1)
    groups = defaultdict(list)
    for index in range(max_index):
        groups[scramble(index, generator.cipher_key, max_index)].append(index)

    collisions = [indices for indices in groups.values() if len(indices) > 1]
    assert collisions
    for indices in collisions[:15]:
        human_id = generator.encode_scrambled(indices[-1], 1)
        assert generator.decode_from_scrambled(human_id) == indices[0]


def test_scrambled_decode_with_two_adjectives():
    key = (0x12345678, 0x9ABCDEF0, 0x0FEDCBA9, 0x87654321)
    gen = Generator(ADJECTIVES, NOUNS, seed=54321, cipher_key=key)
    max_index = gen.domain_size(2)
    for index in range(0, max_index, 113):
        decoded = gen.decode_from_scrambled(gen.encode_scrambled(index, 2))
        assert scramble(decoded, key, max_index) == scramble(index, key, max_index)


def test_scrambled_decode_exhausted(generator, monkeypatch):
    """A value no index scrambles to is reported, not looped on."""
    monkeypatch.setattr(encoding, "scramble", lambda value, key, max_index: 0)
    with pytest.raises(SearchExhaustedError):
        generator.decode_from_scrambled(generator.encode(5, 1))


def test_scrambled_decode_errors(generator):
    with pytest.raises(FormatError):
        generator.decode_from_scrambled("quick")
    with pytest.raises(UnknownNounError):
        generator.decode_from_scrambled("quick-wolf")
    assert generator.scrambled_domain_size("quick-fox-3") == 600


# ===================================
# 6. Default Generator
# ===================================

def test_default_generator_roundtrip():
    assert get_generator() is get_generator()
    for index in (0, 1, 123456789, get_generator().domain_size(2) - 1):
        human_id = encode_id(index)
        assert len(human_id.split("-")) >= 3
        assert decode_id(human_id) == index


def test_default_generator_honours_explicit_zero_adjectives():
    """Zero is passed through to validation rather than replaced by the default."""
    with pytest.raises(InvalidAdjectiveCountError):
        encode_id(5, 0)
    assert encode_id(5, 1) == get_generator().encode(5, 1)
