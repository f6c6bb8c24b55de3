import pytest

from aes_modes.ecb_cbc_ctr import BLOCK
from attacks.ecb_cut_paste import admin_block, align_role_boundary, forge_admin_profile
from oracles.profile_server import ProfileServer


def test_profile_encoding_and_uid():
    server = ProfileServer(seed=1)
    assert server.profile_for(b"foo@bar.com") == b"email=foo@bar.com&uid=10&role=user"
    token = server.query(b"foo@bar.com")
    assert server.uid == 11
    assert server.parse(token) == {b"email": b"foo@bar.com", b"uid": b"10", b"role": b"user"}


def test_email_cannot_inject_fields():
    server = ProfileServer(seed=2)
    profile = server.parse(server.query(b"foo@bar.com&role=admin"))
    assert profile[b"role"] == b"user"
    assert profile[b"email"] == b"foo@bar.com%26role%3Dadmin"


def test_alignment_leaves_user_alone_in_last_block():
    server = ProfileServer(seed=3)
    email = align_role_boundary(server.query, b"xyz@gmail.com")
    plain = server.profile_for(email)
    assert plain.endswith(b"&role=user")
    assert (len(plain) - len(b"user")) % BLOCK == 0


@pytest.mark.parametrize("email", [b"a@b.c", b"xyz@gmail.com", b"someone.else@example.org"])
def test_forged_token_is_admin_with_intact_email(email):
    server = ProfileServer(seed=4)
    token, used = forge_admin_profile(server, email)
    profile = server.parse(token)
    assert profile[b"role"] == b"admin"
    assert profile[b"email"] == used and used.endswith(email)
    assert b"uid" in profile


def test_admin_block_is_one_block():
    server = ProfileServer(seed=5)
    assert len(admin_block(server.query)) == BLOCK
