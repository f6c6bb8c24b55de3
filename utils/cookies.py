"""key=value cookie strings as used by the bit-flipping servers."""


def quote_out(value: bytes, specials: bytes = b";=") -> bytes:
    """Percent-encode the separator bytes so user input cannot inject fields."""
    out = bytearray()
    for c in value:
        if c in specials or c == ord("%"):
            out += b"%%%02X" % c
        else:
            out.append(c)
    return bytes(out)


def parse_cookie(data: bytes, sep: bytes = b";") -> dict[bytes, bytes]:
    fields = {}
    for item in data.split(sep):
        if b"=" not in item:
            continue
        key, _, value = item.partition(b"=")
        fields[key] = value
    return fields
