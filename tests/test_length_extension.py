import pytest
from Crypto.Hash import MD4 as LibMD4
from Crypto.Hash import SHA1 as LibSHA1

from attacks.length_extension import HASHES, find_key_length, forge, glue_padding
from hashes.merkle_damgard import MD4, SHA1
from oracles.mac_server import PrefixMacServer
from utils.errors import AttackFailed, MalformedInput

MESSAGE = b"comment1=cooking%20MCs;userdata=foo;comment2=%20like%20a%20pound%20of%20bacon"
SUFFIX = b";admin=true"


@pytest.mark.parametrize("ours, lib", [(SHA1, LibSHA1), (MD4, LibMD4)])
@pytest.mark.parametrize("length", [0, 1, 55, 56, 63, 64, 65, 200])
def test_hashes_match_library(ours, lib, length):
    data = bytes(i % 256 for i in range(length))
    assert ours(data).digest() == lib.new(data).digest()


def test_incremental_update_and_copy():
    h = SHA1()
    h.update(b"hello ")
    snapshot = h.copy()
    h.update(b"world")
    assert h.hexdigest() == LibSHA1.new(b"hello world").hexdigest()
    assert snapshot.digest() == LibSHA1.new(b"hello ").digest()


def test_padding_layout():
    pad = SHA1.padding(3)
    assert len(3 * b"x" + pad) == 64
    assert pad[0] == 0x80 and pad[-8:] == (24).to_bytes(8, "big")
    assert MD4.padding(3)[-8:] == (24).to_bytes(8, "little")
    assert len(SHA1.padding(56)) == 72


def test_from_digest_validates_input():
    with pytest.raises(MalformedInput):
        SHA1.from_digest(b"\x00" * 20, 10)
    with pytest.raises(MalformedInput):
        MD4.from_digest(b"\x00" * 20, 64)


@pytest.mark.parametrize("algorithm", ["sha1", "md4"])
@pytest.mark.parametrize("key_length", range(1, 65))
def test_forgery_for_each_key_length(algorithm, key_length):
    server = PrefixMacServer(b"K" * key_length, algorithm)
    hash_cls = HASHES[algorithm]
    mac = server.sign(MESSAGE)

    forged_message, forged_mac = forge(hash_cls, mac, MESSAGE, SUFFIX, key_length)
    assert forged_message == MESSAGE + glue_padding(hash_cls, key_length + len(MESSAGE)) + SUFFIX
    assert server.verify(forged_message, forged_mac)

    for wrong in (key_length - 1, key_length + 1):
        assert not server.verify(*forge(hash_cls, mac, MESSAGE, SUFFIX, wrong))


@pytest.mark.parametrize("algorithm", ["sha1", "md4"])
def test_find_key_length(algorithm):
    server = PrefixMacServer(b"unknown key!", algorithm)
    mac = server.sign(MESSAGE)
    key_length, forged_message, forged_mac = find_key_length(
        server.verify, HASHES[algorithm], mac, MESSAGE, SUFFIX
    )
    assert key_length == 12
    assert forged_message.endswith(SUFFIX)
    assert server.verify(forged_message, forged_mac)


def test_find_key_length_gives_up():
    server = PrefixMacServer(b"k" * 80)
    mac = server.sign(MESSAGE)
    with pytest.raises(AttackFailed):
        find_key_length(server.verify, SHA1, mac, MESSAGE, SUFFIX, max_key_length=16)


def test_mac_server_rejects_unknown_algorithm():
    with pytest.raises(ValueError):
        PrefixMacServer(b"k", "sha256")
