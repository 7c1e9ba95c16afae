import os
import unittest

from pacextractor.crc16 import crc16, lookup_table


class TestCrc16(unittest.TestCase):
    def test_check_vector(self):
        self.assertEqual(crc16(b'123456789'), 0xbb3d)

    def test_single_byte(self):
        self.assertEqual(crc16(b'A'), 0x30c0)

    def test_empty_keeps_state(self):
        self.assertEqual(crc16(b''), 0)
        self.assertEqual(crc16(b'', 0x1234), 0x1234)

    def test_table(self):
        self.assertEqual(len(lookup_table), 256)
        self.assertEqual(lookup_table[0], 0)
        self.assertEqual(lookup_table[1], 0xc0c1)
        self.assertEqual(lookup_table[255], 0x4040)

    def test_incremental_matches_whole_buffer(self):
        data = os.urandom(1000) + b'123456789' + bytes(range(256))
        whole = crc16(data)
        for split in (0, 1, 9, 500, 1009, len(data) - 1, len(data)):
            self.assertEqual(crc16(data[split:], crc16(data[:split])), whole)

    def test_chunked(self):
        data = bytes(range(256)) * 40
        crc = 0
        for i in range(0, len(data), 333):
            crc = crc16(data[i:i + 333], crc)
        self.assertEqual(crc, crc16(data))

    def test_accepts_buffers(self):
        data = b'123456789'
        self.assertEqual(crc16(bytearray(data)), 0xbb3d)
        self.assertEqual(crc16(memoryview(data)), 0xbb3d)

    def test_result_is_16_bit(self):
        for data in (b'\xff' * 100, os.urandom(64)):
            self.assertTrue(0 <= crc16(data, 0xffff) <= 0xffff)


if __name__ == '__main__':
    unittest.main()
