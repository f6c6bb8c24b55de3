"""
Length-extension forgery against MAC = H(key || message).

Given (message, MAC) and a guess of len(key), the attacker resumes the hash
from the MAC's chaining words and appends ``suffix`` after the glue padding
the server itself would have applied to key || message. The forged MAC is
valid for message || glue || suffix without ever learning the key. HMAC's
nested construction is not affected.
"""

from __future__ import annotations

import logging
from typing import Callable, Type

from hashes.merkle_damgard import MD4, SHA1, MerkleDamgardHash
from oracles.mac_server import PrefixMacServer
from utils.errors import AttackFailed

logger = logging.getLogger(__name__)

HASHES: dict[str, Type[MerkleDamgardHash]] = {"sha1": SHA1, "md4": MD4}


def glue_padding(hash_cls: Type[MerkleDamgardHash], length: int) -> bytes:
    """Padding the server's hash appended after ``length`` bytes of key || message."""

    return hash_cls.padding(length)


def forge(
    hash_cls: Type[MerkleDamgardHash],
    digest: bytes,
    message: bytes,
    suffix: bytes,
    key_length: int,
) -> tuple[bytes, bytes]:
    """Return ``(forged_message, forged_digest)`` for a guessed key length."""

    total_prev = key_length + len(message)
    glue = glue_padding(hash_cls, total_prev)
    resumed = hash_cls.from_digest(digest, total_prev + len(glue))
    resumed.update(suffix)
    return message + glue + suffix, resumed.digest()


def find_key_length(
    verify: Callable[[bytes, bytes], bool],
    hash_cls: Type[MerkleDamgardHash],
    digest: bytes,
    message: bytes,
    suffix: bytes,
    max_key_length: int = 64,
) -> tuple[int, bytes, bytes]:
    """Try key lengths 0..max_key_length until ``verify`` accepts a forgery."""

    for guess in range(max_key_length + 1):
        forged_message, forged_digest = forge(hash_cls, digest, message, suffix, guess)
        if verify(forged_message, forged_digest):
            logger.info("%s forgery accepted with key length %d", hash_cls.name, guess)
            return guess, forged_message, forged_digest
    raise AttackFailed(f"no key length up to {max_key_length} produced a valid forgery")


def demo_length_extension(key: bytes = b"potato", algorithm: str = "sha1") -> dict[str, object]:
    server = PrefixMacServer(key, algorithm)
    message = b"comment1=cooking%20MCs;userdata=foo;comment2=%20like%20a%20pound%20of%20bacon"
    suffix = b";admin=true"
    mac = server.sign(message)
    key_length, forged_message, forged_mac = find_key_length(
        server.verify, HASHES[server.algorithm], mac, message, suffix
    )
    return {
        "algorithm": server.algorithm,
        "mac": mac,
        "key_length": key_length,
        "forged_message": forged_message,
        "forged_mac": forged_mac,
        "ok": server.verify(forged_message, forged_mac) and forged_message.endswith(suffix),
    }
