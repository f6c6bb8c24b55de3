import logging

import pytest

from attacks.cbc_padding_oracle import padding_oracle_attack, recover_block
from oracles.padding_server import PaddingOracleServer
from utils.errors import MalformedInput, UnrecoverableByte
from utils.fixtures import PADDING_ORACLE_TEXTS


@pytest.fixture()
def server():
    return PaddingOracleServer(seed=54321)


@pytest.mark.parametrize(
    "plaintext",
    [
        b"A",
        b"exactly sixteen!",
        b"x" * 15 + b"\x01",
        b"ends with two\x02\x02",
        b"five blocks " * 6 + b"and some more",
    ],
)
def test_recovers_chosen_plaintexts(server, plaintext):
    ct, iv = server.encrypt(plaintext)
    assert padding_oracle_attack(ct, iv, server.check_padding) == plaintext


def test_recovers_every_stored_text(server):
    for text in PADDING_ORACLE_TEXTS:
        ct, iv = server.encrypt(text)
        assert padding_oracle_attack(ct, iv, server.check_padding) == text


def test_stats_count_every_oracle_call(server):
    ct, iv = server.encrypt(b"Y" * 40)
    before = server.checks
    plain, stats = padding_oracle_attack(ct, iv, server.check_padding, return_stats=True)
    assert plain == b"Y" * 40
    assert len(stats.queries_per_block) == 3
    assert stats.total_queries == server.checks - before


def test_server_reports_padding_as_bool(server):
    ct, iv = server.encrypt(b"hello")
    assert server.check_padding(ct, iv) is True
    tampered = bytearray(iv)
    tampered[-1] ^= 0xFF
    assert isinstance(server.check_padding(ct, bytes(tampered)), bool)


def test_rejects_malformed_ciphertext(server):
    _, iv = server.encrypt(b"hello")
    with pytest.raises(MalformedInput):
        padding_oracle_attack(b"", iv, server.check_padding)
    with pytest.raises(MalformedInput):
        padding_oracle_attack(b"x" * 17, iv, server.check_padding)


def test_lying_oracle_leaves_byte_unrecoverable():
    with pytest.raises(UnrecoverableByte) as info:
        recover_block(b"\x00" * 16, b"\x00" * 16, lambda ct, iv: False, base_position=32)
    assert info.value.position == 47


def test_rejects_wrong_iv_length(server):
    ct, _ = server.encrypt(b"hello")
    with pytest.raises(MalformedInput):
        padding_oracle_attack(ct, b"short iv", server.check_padding)


def test_server_logs_checks_answered(server, caplog):
    ct, iv = server.encrypt(b"hello")
    server.check_padding(ct, iv)
    server.check_padding(ct, iv)
    with caplog.at_level(logging.DEBUG, logger="oracles.padding_server"):
        server.encrypt(b"again")
    assert "2 padding checks answered" in caplog.text
