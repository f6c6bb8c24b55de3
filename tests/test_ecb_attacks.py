import logging

import pytest

from aes_modes.ecb_cbc_ctr import aes_cbc_encrypt, aes_ecb_encrypt
from attacks.ecb_byte_at_a_time import (
    discover_block_size,
    discover_prefix_length,
    profile_oracle,
    recover_suffix,
)
from attacks.ecb_detector import count_repeated_blocks, detect_mode, find_ecb_ciphertext
from oracles.block_oracle import BlockOracle, CipherMode, ModePolicy
from utils.errors import AttackFailed, MalformedInput
from utils.fixtures import SECRET_SUFFIX


def _prefix(n):
    # nonzero bytes so the prefix cannot extend the zero filler
    return bytes((i * 37 + 11) % 255 + 1 for i in range(n))


def test_detector_agrees_with_random_oracle():
    oracle = BlockOracle.ecb_or_cbc(seed=12345)
    for _ in range(10):
        guess = detect_mode(oracle.query, probe=b"x" * 64)
        assert guess is oracle.last_mode


@pytest.mark.parametrize("mode, expected", [(ModePolicy.ECB, CipherMode.ECB), (ModePolicy.CBC, CipherMode.CBC)])
def test_detector_fixed_modes(mode, expected):
    oracle = BlockOracle(prefix=b"abc", mode=mode, seed=7)
    assert detect_mode(oracle.query) is expected


def test_count_repeated_blocks():
    data = b"A" * 16 + b"B" * 16 + b"A" * 16 + b"A" * 16
    assert count_repeated_blocks(data) == 2
    assert count_repeated_blocks(bytes(range(64))) == 0


def test_oracle_counts_queries_and_rejects_bad_fuzz():
    oracle = BlockOracle.secret_suffix(b"secret", seed=1)
    oracle.query(b"")
    oracle.query(b"a")
    assert oracle.queries == 2
    with pytest.raises(MalformedInput):
        BlockOracle(fuzz=(10, 5))


def test_oracle_is_reproducible_from_seed():
    a = BlockOracle.secret_suffix(b"secret", seed=99)
    b = BlockOracle.secret_suffix(b"secret", seed=99)
    assert a.query(b"hello") == b.query(b"hello")


@pytest.mark.parametrize("prefix_length", [0, 5, 16, 23, 37])
def test_profile_oracle(prefix_length):
    oracle = BlockOracle.secret_suffix(SECRET_SUFFIX, prefix=_prefix(prefix_length), seed=3)
    block_size, total = discover_block_size(oracle.query)
    assert block_size == 16
    assert total == prefix_length + len(SECRET_SUFFIX)
    assert discover_prefix_length(oracle.query, block_size) == prefix_length

    profile = profile_oracle(oracle.query)
    assert profile.message_length == len(SECRET_SUFFIX)


@pytest.mark.parametrize("prefix_length", [0, 5, 23, 37])
def test_recover_suffix_with_prefix(prefix_length):
    oracle = BlockOracle.secret_suffix(SECRET_SUFFIX, prefix=_prefix(prefix_length), seed=1337)
    assert recover_suffix(oracle.query) == SECRET_SUFFIX


def test_recover_short_suffix():
    oracle = BlockOracle.secret_suffix(b"hi!", seed=4)
    assert recover_suffix(oracle.query) == b"hi!"


def test_cbc_oracle_is_not_attackable():
    oracle = BlockOracle(suffix=SECRET_SUFFIX, mode=ModePolicy.CBC, seed=5)
    with pytest.raises(AttackFailed):
        profile_oracle(oracle.query)


def test_find_ecb_ciphertext_in_batch():
    key = b"YELLOW SUBMARINE"
    plaintext = b"0123456789abcdef" * 4
    batch = [aes_cbc_encrypt(key, plaintext, bytes([i]) * 16) for i in range(8)]
    batch.insert(5, aes_ecb_encrypt(key, plaintext))
    assert find_ecb_ciphertext(batch) == 5


def test_find_ecb_ciphertext_without_repeats():
    batch = [aes_cbc_encrypt(b"k" * 16, b"a" * 64, bytes([i]) * 16) for i in range(3)]
    with pytest.raises(AttackFailed):
        find_ecb_ciphertext(batch)
    with pytest.raises(MalformedInput):
        find_ecb_ciphertext([])


def test_oracle_logs_mode_per_query(caplog):
    oracle = BlockOracle.ecb_or_cbc(seed=21)
    with caplog.at_level(logging.DEBUG, logger="oracles.block_oracle"):
        oracle.query(b"hello")
    assert f"under {oracle.last_mode.name}" in caplog.text
