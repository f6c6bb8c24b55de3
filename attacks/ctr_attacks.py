"""
Malleability attacks on unauthenticated CTR and CBC, and CBC with IV == key.

  - Edit oracle: rewriting the plaintext with zeros makes the service hand
    back its raw keystream.
  - Bit flipping: XOR (desired ^ known) into the ciphertext at the same
    offset (CTR) or into the previous block (CBC).
  - IV == key: decrypting C0 || 0 || C0 yields P'0 = D(C0) ^ key and
    P'2 = D(C0), so key = P'0 ^ P'2.
"""

from __future__ import annotations

import logging
import random
from typing import Callable

from aes_modes.ecb_cbc_ctr import BLOCK, xor_bytes
from oracles.cookie_server import COOKIE_PREFIX, CookieServer
from oracles.iv_key_server import IvKeyServer
from oracles.random_access_ctr import RandomAccessCTR
from utils.errors import MalformedInput
from utils.fixtures import FUNKY_LINE

logger = logging.getLogger(__name__)

ADMIN_FIELD = b";role=admin;a="


def recover_plaintext_via_edit(oracle: RandomAccessCTR) -> bytes:
    """Recover the stored plaintext; the oracle's contents are zeroed afterwards."""

    cipher = oracle.ciphertext()
    oracle.edit(0, b"\x00" * len(cipher))
    keystream = oracle.ciphertext()
    return xor_bytes(cipher, keystream)


def flip_bytes(ciphertext: bytes, offset: int, known: bytes, desired: bytes) -> bytes:
    """Turn ``known`` plaintext at ``offset`` into ``desired`` (stream modes)."""

    if len(known) != len(desired):
        raise MalformedInput("known and desired plaintext differ in length")
    if offset < 0 or offset + len(known) > len(ciphertext):
        raise MalformedInput(f"range {offset}..{offset + len(known)} outside ciphertext")
    out = bytearray(ciphertext)
    for i, (k, d) in enumerate(zip(known, desired)):
        out[offset + i] ^= k ^ d
    return bytes(out)


def flip_cbc_bytes(
    ciphertext: bytes, offset: int, known: bytes, desired: bytes, block_size: int = BLOCK
) -> bytes:
    """Same as :func:`flip_bytes` for CBC: the delta lands one block earlier.

    The block preceding the edited range decrypts to garbage.
    """

    if offset < block_size:
        raise MalformedInput("CBC flips cannot target the first block without the IV")
    first, last = offset // block_size, (offset + len(known) - 1) // block_size
    if first != last:
        raise MalformedInput("CBC flip range must stay inside one block")
    return flip_bytes(ciphertext, offset - block_size, known, desired)


def forge_admin_cookie(server: CookieServer) -> bytes:
    """Produce a ciphertext the server accepts as ``role=admin``."""

    if server.mode == "ctr":
        filler = b"A" * len(ADMIN_FIELD)
        ct = server.encrypt(filler)
        return flip_bytes(ct, len(COOKIE_PREFIX), filler, ADMIN_FIELD)

    # two filler blocks: the first is sacrificed, the second is rewritten
    filler = b"A" * (2 * BLOCK)
    ct = server.encrypt(filler)
    target = len(COOKIE_PREFIX) + BLOCK
    desired = ADMIN_FIELD.rjust(BLOCK, b"A")
    return flip_cbc_bytes(ct, target, filler[BLOCK:], desired)


def recover_key_iv_equals_key(ciphertext: bytes, decrypt: Callable[[bytes], bytes]) -> bytes:
    """Recover a CBC key that doubles as the IV.

    ``decrypt`` must return the (padding-stripped) plaintext of the submitted
    ciphertext, e.g. from an error report.
    """

    if len(ciphertext) % BLOCK or len(ciphertext) < 3 * BLOCK:
        raise MalformedInput("need at least three whole ciphertext blocks")
    c0 = ciphertext[:BLOCK]
    # the original last two blocks keep the padding valid
    forged = c0 + b"\x00" * BLOCK + c0 + ciphertext[-2 * BLOCK :]
    plain = decrypt(forged)
    if len(plain) < 3 * BLOCK:
        raise MalformedInput("decryption oracle returned a truncated plaintext")
    return xor_bytes(plain[:BLOCK], plain[2 * BLOCK : 3 * BLOCK])


def demo_ctr_attacks(seed: int = 2024) -> dict[str, object]:
    rng = random.Random(seed)
    editable = RandomAccessCTR(rng.randbytes(16), FUNKY_LINE)
    recovered = recover_plaintext_via_edit(editable)

    cookie_results = {}
    for mode in ("ctr", "cbc"):
        server = CookieServer(mode=mode, seed=seed)
        cookie_results[mode] = server.is_admin(forge_admin_cookie(server))

    logger.info("CTR/CBC malleability demo finished")
    return {
        "edit_recovered": recovered == FUNKY_LINE,
        "ctr_admin": cookie_results["ctr"],
        "cbc_admin": cookie_results["cbc"],
    }


def demo_iv_key_recovery(seed: int = 2024) -> dict[str, object]:
    key = random.Random(seed).randbytes(16)
    server = IvKeyServer(key)
    ct = server.encrypt(b"a" * (5 * BLOCK))
    cracked = recover_key_iv_equals_key(ct, lambda c: server.ascii_check(c)[1])
    return {
        "key": key,
        "cracked_key": cracked,
        "key_ok": server.has_key(cracked),
    }
