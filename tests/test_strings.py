import unittest

from pacextractor.strings import decode_wide, encode_wide


class TestDecodeWide(unittest.TestCase):
    def test_decode(self):
        self.assertEqual(decode_wide('FDL'.encode('utf-16le') + b'\x00' * 10), 'FDL')

    def test_empty_field(self):
        self.assertEqual(decode_wide(b'\x00' * 512), '')
        self.assertEqual(decode_wide(b''), '')

    def test_stops_at_zero_unit(self):
        field = 'AB\x00CD'.encode('utf-16le')
        self.assertEqual(decode_wide(field), 'AB')

    def test_truncates_at_max_length(self):
        self.assertEqual(decode_wide(encode_wide('ABCDEF', 10), 3), 'ABC')
        self.assertEqual(decode_wide(encode_wide('ABCDEF', 10), 0), '')

    def test_keeps_low_byte(self):
        self.assertEqual(decode_wide(b'\x41\x01\x42\xff'), 'AB')

    def test_unterminated_field(self):
        field = encode_wide('X' * 24, 24)
        self.assertEqual(len(field), 48)
        self.assertEqual(decode_wide(field, 24), 'X' * 24)
        self.assertEqual(decode_wide(field, 256), 'X' * 24)

    def test_odd_trailing_byte_is_ignored(self):
        self.assertEqual(decode_wide(b'A\x00B'), 'A')

    def test_returns_new_string_each_call(self):
        first = decode_wide(encode_wide('fdl1.bin', 256))
        second = decode_wide(encode_wide('nvitem.bin', 256))
        self.assertEqual(first, 'fdl1.bin')
        self.assertEqual(second, 'nvitem.bin')


class TestEncodeWide(unittest.TestCase):
    def test_pads(self):
        self.assertEqual(encode_wide('NV', 4), b'N\x00V\x00\x00\x00\x00\x00')

    def test_truncates(self):
        self.assertEqual(encode_wide('ABCDEF', 2), b'A\x00B\x00')

    def test_round_trip(self):
        for text in ('', 'FDL', 'FDL2', 'NV', 'system.img', 'u-boot-spl-16k.bin',
                     'SC9863A_userdebug_11.0', 'x' * 256):
            field = encode_wide(text, 256)
            self.assertEqual(decode_wide(field), text)
            self.assertEqual(encode_wide(decode_wide(field), 256), field)


if __name__ == '__main__':
    unittest.main()
