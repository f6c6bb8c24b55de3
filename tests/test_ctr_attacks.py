import pytest

from attacks.ctr_attacks import (
    ADMIN_FIELD,
    flip_bytes,
    flip_cbc_bytes,
    forge_admin_cookie,
    recover_key_iv_equals_key,
    recover_plaintext_via_edit,
)
from oracles.cookie_server import COOKIE_PREFIX, CookieServer
from oracles.iv_key_server import IvKeyServer
from oracles.random_access_ctr import RandomAccessCTR
from utils.cookies import parse_cookie, quote_out
from utils.errors import MalformedInput
from utils.fixtures import FUNKY_LINE

KEY = b"YELLOW SUBMARINE"


def test_edit_oracle_leaks_plaintext():
    oracle = RandomAccessCTR(KEY, FUNKY_LINE)
    assert recover_plaintext_via_edit(oracle) == FUNKY_LINE


def test_edit_truncates_at_end_and_checks_offset():
    oracle = RandomAccessCTR(KEY, b"abcdef")
    before = oracle.ciphertext()
    oracle.edit(4, b"XYZW")
    after = oracle.ciphertext()
    assert len(after) == 6
    assert after[:4] == before[:4]
    with pytest.raises(MalformedInput):
        oracle.edit(7, b"x")


def test_quote_out_blocks_field_injection():
    quoted = quote_out(b";role=admin")
    assert b";" not in quoted and b"=" not in quoted
    server = CookieServer(mode="cbc", seed=1)
    assert not server.is_admin(server.encrypt(b";role=admin;"))


def test_parse_cookie():
    fields = parse_cookie(b"a=1;role=admin;junk;b=x=y")
    assert fields[b"role"] == b"admin"
    assert fields[b"b"] == b"x=y"
    assert b"junk" not in fields


@pytest.mark.parametrize("mode", ["ctr", "cbc"])
def test_forged_cookie_grants_admin(mode):
    server = CookieServer(mode=mode, seed=11)
    assert server.is_admin(forge_admin_cookie(server))


def test_ctr_flip_only_touches_target_bytes():
    server = CookieServer(mode="ctr", seed=5)
    filler = b"A" * len(ADMIN_FIELD)
    ct = server.encrypt(filler)
    forged = flip_bytes(ct, len(COOKIE_PREFIX), filler, ADMIN_FIELD)
    plain = server.decrypt(forged)
    assert plain.startswith(COOKIE_PREFIX + ADMIN_FIELD)


def test_flip_argument_checks():
    with pytest.raises(MalformedInput):
        flip_bytes(b"x" * 8, 0, b"ab", b"a")
    with pytest.raises(MalformedInput):
        flip_bytes(b"x" * 8, 7, b"ab", b"cd")
    with pytest.raises(MalformedInput):
        flip_cbc_bytes(b"x" * 48, 4, b"ab", b"cd")
    with pytest.raises(MalformedInput):
        flip_cbc_bytes(b"x" * 48, 31, b"ab", b"cd")


def test_iv_equals_key_recovery():
    server = IvKeyServer(KEY)
    ct = server.encrypt(b"a" * 48)
    cracked = recover_key_iv_equals_key(ct, lambda c: server.ascii_check(c)[1])
    assert cracked == KEY and server.has_key(cracked)


def test_iv_equals_key_needs_three_blocks():
    server = IvKeyServer(KEY)
    with pytest.raises(MalformedInput):
        recover_key_iv_equals_key(server.encrypt(b"short"), lambda c: server.ascii_check(c)[1])
