import struct

NAME_LENGTH = 256


def decode_wide(field, max_length=NAME_LENGTH):
    """
    Decodes a fixed-width UTF-16LE name field into a narrow string.

    Only the low byte of each 16-bit unit is kept, the way SPD tools do.
    Decoding stops at the first zero unit, after `max_length` characters,
    or at the end of the field.
    """
    units = len(field) // 2
    chars = []
    for (unit,) in struct.iter_unpack('<H', bytes(field[:units * 2])):
        if unit == 0 or len(chars) >= max_length:
            break
        chars.append(chr(unit & 0xff))
    return ''.join(chars)


def encode_wide(text, units):
    """Lays out `text` as a zero padded field of `units` UTF-16LE units."""
    data = b''.join(struct.pack('<H', ord(c) & 0xffff) for c in text[:units])
    return data.ljust(units * 2, b'\x00')
