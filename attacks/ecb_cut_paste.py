"""
ECB cut-and-paste: forge an admin profile token from user-level queries.

ECB encrypts every block independently, so ciphertext blocks from separate
queries can be spliced together.

  1. Grow the email until the token length jumps; four more bytes push
     ``user`` alone into the last block, leaving ``...&role=`` block-aligned.
  2. Place ``admin`` plus valid PKCS#7 padding at the start of the second
     block of another query.
  3. Replace the ``user`` block with the ``admin`` block.

The uid must keep the same number of digits across the queries.
"""

from __future__ import annotations

import logging
from typing import Callable

from aes_modes.ecb_cbc_ctr import BLOCK, pkcs7_pad
from oracles.profile_server import ProfileServer
from utils.errors import AttackFailed, MalformedInput

logger = logging.getLogger(__name__)

QueryFn = Callable[[bytes], bytes]

PROFILE_HEAD = b"email="
ROLE_VALUE = b"user"


def align_role_boundary(query: QueryFn, email: bytes, block_size: int = BLOCK) -> bytes:
    """Return ``email`` with filler prepended so the role value starts a block."""

    baseline = len(query(email))
    for n in range(1, block_size + 1):
        if len(query(b"x" * n + email)) > baseline:
            return b"x" * ((n + len(ROLE_VALUE)) % block_size) + email
    raise AttackFailed(f"token length never changed within {block_size} filler bytes")


def admin_block(query: QueryFn, block_size: int = BLOCK) -> bytes:
    """Ciphertext block that decrypts to ``admin`` followed by PKCS#7 padding."""

    if len(PROFILE_HEAD) >= block_size:
        raise MalformedInput("profile header does not fit in the first block")
    filler = b"x" * (block_size - len(PROFILE_HEAD))
    token = query(filler + pkcs7_pad(b"admin", block_size))
    return token[block_size : 2 * block_size]


def forge_admin_profile(
    server: ProfileServer, email: bytes = b"xyz@gmail.com"
) -> tuple[bytes, bytes]:
    """Return ``(token, email)`` where the token parses to ``role=admin``."""

    aligned = align_role_boundary(server.query, email)
    token = server.query(aligned)
    forged = token[:-BLOCK] + admin_block(server.query)
    logger.info("Spliced admin block onto a %d-byte token", len(token))
    return forged, aligned


def demo_cut_paste(seed: int = 13) -> dict[str, object]:
    server = ProfileServer(seed=seed)
    token, email = forge_admin_profile(server)
    profile = server.parse(token)
    return {
        "email": email,
        "token": token,
        "profile": profile,
        "ok": profile.get(b"role") == b"admin" and profile.get(b"email") == email,
    }


__all__ = ["align_role_boundary", "admin_block", "forge_admin_profile", "demo_cut_paste"]
