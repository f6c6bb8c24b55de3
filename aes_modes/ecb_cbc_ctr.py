"""
ECB / CBC / CTR modes built on the single-block AES primitive.

pycryptodome supplies the block cipher itself (used strictly one 16-byte
block at a time); chaining, counters and PKCS#7 live here so the attacks can
reason about exactly what each mode does with every block.
"""

from __future__ import annotations

import struct

from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes

from utils.errors import InvalidPadding, MalformedInput

BLOCK = 16
NONCE_SIZE = 8
_COUNTER_MASK = (1 << 64) - 1


class BlockPrimitive:
    """One AES key, one block in, one block out."""

    def __init__(self, key: bytes):
        if len(key) not in (16, 24, 32):
            raise MalformedInput(f"AES key must be 16, 24 or 32 bytes, got {len(key)}")
        self._cipher = AES.new(key, AES.MODE_ECB)

    def encrypt_block(self, block: bytes) -> bytes:
        if len(block) != BLOCK:
            raise MalformedInput(f"expected a {BLOCK}-byte block, got {len(block)}")
        return self._cipher.encrypt(block)

    def decrypt_block(self, block: bytes) -> bytes:
        if len(block) != BLOCK:
            raise MalformedInput(f"expected a {BLOCK}-byte block, got {len(block)}")
        return self._cipher.decrypt(block)


def xor_bytes(a: bytes, b: bytes) -> bytes:
    if len(a) != len(b):
        raise MalformedInput(f"xor of unequal lengths ({len(a)} != {len(b)})")
    return bytes(x ^ y for x, y in zip(a, b))


def split_blocks(data: bytes, block: int = BLOCK) -> list[bytes]:
    return [data[i : i + block] for i in range(0, len(data), block)]


def pkcs7_pad(b: bytes, block: int = BLOCK) -> bytes:
    if not 1 <= block <= 255:
        raise MalformedInput("PKCS#7 block size must be in 1..255")
    pad = block - (len(b) % block)
    return b + bytes([pad]) * pad


def pkcs7_unpad(b: bytes, block: int = BLOCK) -> bytes:
    if not b or len(b) % block != 0:
        raise MalformedInput("Invalid padded data length")
    pad = b[-1]
    if pad < 1 or pad > block or b[-pad:] != bytes([pad]) * pad:
        raise InvalidPadding("Bad PKCS#7 padding")
    return b[:-pad]


def _check_aligned(ct: bytes) -> None:
    if len(ct) % BLOCK != 0:
        raise MalformedInput(f"ciphertext length {len(ct)} is not a multiple of {BLOCK}")


def aes_ecb_encrypt(key: bytes, pt: bytes) -> bytes:
    prim = BlockPrimitive(key)
    data = pkcs7_pad(pt)
    return b"".join(prim.encrypt_block(block) for block in split_blocks(data))


def aes_ecb_decrypt(key: bytes, ct: bytes) -> bytes:
    _check_aligned(ct)
    prim = BlockPrimitive(key)
    pt = b"".join(prim.decrypt_block(block) for block in split_blocks(ct))
    return pkcs7_unpad(pt)


def aes_cbc_encrypt(key: bytes, pt: bytes, iv: bytes) -> bytes:
    if len(iv) != BLOCK:
        raise MalformedInput(f"IV must be {BLOCK} bytes")
    prim = BlockPrimitive(key)
    prev = iv
    out = []
    for block in split_blocks(pkcs7_pad(pt)):
        prev = prim.encrypt_block(xor_bytes(block, prev))
        out.append(prev)
    return b"".join(out)


def aes_cbc_decrypt(key: bytes, ct: bytes, iv: bytes) -> bytes:
    """Decrypt and strip padding; raises :class:`InvalidPadding` on bad padding."""

    if len(iv) != BLOCK:
        raise MalformedInput(f"IV must be {BLOCK} bytes")
    _check_aligned(ct)
    prim = BlockPrimitive(key)
    prev = iv
    out = []
    for block in split_blocks(ct):
        out.append(xor_bytes(prim.decrypt_block(block), prev))
        prev = block
    return pkcs7_unpad(b"".join(out))


def ctr_keystream(key: bytes, nonce: bytes, length: int, *, counter: int = 0) -> bytes:
    """Keystream of ``length`` bytes: E(nonce || counter_be64) per block."""

    if len(nonce) != NONCE_SIZE:
        raise MalformedInput(f"CTR nonce must be {NONCE_SIZE} bytes")
    prim = BlockPrimitive(key)
    blocks = []
    for i in range(-(-length // BLOCK)):
        ctr_block = nonce + struct.pack(">Q", (counter + i) & _COUNTER_MASK)
        blocks.append(prim.encrypt_block(ctr_block))
    return b"".join(blocks)[:length]


def aes_ctr_apply(key: bytes, data: bytes, nonce: bytes) -> bytes:
    """Encrypts or decrypts; CTR is its own inverse."""

    return xor_bytes(data, ctr_keystream(key, nonce, len(data)))


def roundtrip_demo():
    """Run a short round-trip across ECB, CBC and CTR.

    Returns a dictionary with the ciphertext artefacts and boolean flags
    confirming that each mode decrypted to the original plaintext.
    """

    key = get_random_bytes(16)
    iv = get_random_bytes(BLOCK)
    nonce = get_random_bytes(NONCE_SIZE)
    msg = b"hello world! " * 5
    cte = aes_ecb_encrypt(key, msg)
    ctc = aes_cbc_encrypt(key, msg, iv)
    ctr = aes_ctr_apply(key, msg, nonce)
    return {
        "key": key,
        "iv": iv,
        "nonce": nonce,
        "plaintext": msg,
        "ecb_ct": cte,
        "cbc_ct": ctc,
        "ctr_ct": ctr,
        "ok_ecb": aes_ecb_decrypt(key, cte) == msg,
        "ok_cbc": aes_cbc_decrypt(key, ctc, iv) == msg,
        "ok_ctr": aes_ctr_apply(key, ctr, nonce) == msg,
    }


if __name__ == "__main__":
    res = roundtrip_demo()
    print("[Roundtrip] AES-128 key:", res["key"].hex())
    print("[Roundtrip] CBC IV:", res["iv"].hex(), "CTR nonce:", res["nonce"].hex())
    print("[Roundtrip] ECB/CBC/CTR ok:", res["ok_ecb"], res["ok_cbc"], res["ok_ctr"])
