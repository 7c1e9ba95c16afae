# CRC-16 used by Spreadtrum's BinPack tool for the two PAC checksums.
#
# This is the plain CRC-16 (a.k.a. CRC-16/ARC or CRC-16/IBM): reflected
# polynomial 0xA001, caller-supplied initial value, no final xor.

CRC_POLY = 0xA001


def precompute_table():
    lookup_table = []
    for i in range(256):
        crc = i
        for x in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ CRC_POLY
            else:
                crc >>= 1
        lookup_table.append(crc)
    return lookup_table

lookup_table = precompute_table()


def crc16(data, crc=0):
    """
    Returns the updated CRC value of `data`, continuing from `crc`.

    crc16(b, crc16(a)) == crc16(a + b), so large inputs can be fed in chunks.
    """
    crc &= 0xffff
    for b in bytes(data):
        crc = (crc >> 8) ^ lookup_table[(crc ^ b) & 0xff]
    return crc


if __name__ == '__main__':
    assert 0xbb3d == crc16(b'123456789')
    assert 0x0000 == crc16(b'')
    assert crc16(b'56789', crc16(b'1234')) == crc16(b'123456789')

    print('All tests passed!')
