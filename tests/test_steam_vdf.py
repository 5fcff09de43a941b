"""Tests for the text and binary VDF codecs."""

import os
import struct
import sys
import tempfile
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from shortcutkit.errors import (
    ERR_BOUNDS,
    ERR_SYNTAX,
    VdfBoundsError,
    VdfInvalidValueError,
    VdfSyntaxError,
    VdfUnknownTypeError,
)
from shortcutkit.steam_vdf import VdfParser
from shortcutkit.vdf_types import Float32, UInt32, UInt64, VdfMap

SHORTCUTS_SKELETON = bytes([0, 115, 104, 111, 114, 116, 99, 117, 116, 115, 0, 8, 8])


# ── Text decode ───────────────────────────────────────────────

class TestParseText(unittest.TestCase):
    def test_nested_blocks(self):
        lines = [
            '"controller_config"',
            '{',
            '\t"name"\t\t"value"',
            '\t"child"',
            '\t{',
            '\t\t"a"\t\t"b"',
            '\t}',
            '\t"after"\t\t"c"',
            '}',
        ]
        data = VdfParser.parse_text(lines)
        self.assertEqual(data, {
            '"controller_config"': {
                '"name"': '"value"',
                '"child"': {'"a"': '"b"'},
                '"after"': '"c"',
            }
        })
        self.assertIsInstance(data['"controller_config"'], VdfMap)

    def test_quotes_are_kept(self):
        data = VdfParser.parse_text(['"key"   "some value"'])
        self.assertEqual(list(data.items()), [('"key"', '"some value"')])

    def test_key_and_brace_on_one_line(self):
        data = VdfParser.parse_text(['"outer" {', '"k" "v"', '}'])
        self.assertEqual(data, {'"outer"': {'"k"': '"v"'}})

    def test_empty_block(self):
        data = VdfParser.parse_text(['"empty"', '{', '}', '"x"\t\t"y"'])
        self.assertEqual(data, {'"empty"': {}, '"x"': '"y"'})

    def test_blank_lines_skipped(self):
        data = VdfParser.parse_text(['', '"a"', '', '{', '"b" "c"', '}', ''])
        self.assertEqual(data, {'"a"': {'"b"': '"c"'}})

    def test_syntax_error_reports_line(self):
        with self.assertRaises(VdfSyntaxError) as ctx:
            VdfParser.parse_text(['"a"\t\t"1"', 'not vdf at all'])
        self.assertEqual(ctx.exception.line, 1)
        self.assertEqual(ctx.exception.code, ERR_SYNTAX)

    def test_unquoted_value_is_syntax_error(self):
        with self.assertRaises(VdfSyntaxError) as ctx:
            VdfParser.parse_text(['"a"\t\tvalue'])
        self.assertEqual(ctx.exception.line, 0)

    def test_open_brace_without_key(self):
        with self.assertRaises(VdfSyntaxError) as ctx:
            VdfParser.parse_text(['{', '"a" "b"', '}'])
        self.assertEqual(ctx.exception.line, 0)

    def test_bare_key_without_block(self):
        with self.assertRaises(VdfSyntaxError) as ctx:
            VdfParser.parse_text(['"a"', '"b" "c"'])
        self.assertEqual(ctx.exception.line, 1)

    def test_bare_key_at_end(self):
        with self.assertRaises(VdfSyntaxError):
            VdfParser.parse_text(['"a" "b"', '"dangling"'])

    def test_stray_closing_brace_ends_document(self):
        data = VdfParser.parse_text(['"a"\t\t"1"', '}', '"b"\t\t"2"'])
        self.assertEqual(list(data.items()), [('"a"', '"1"')])

    def test_backslash_is_plain_text(self):
        data = VdfParser.parse_text(['"path"\t\t"C:\\Games\\"', '"next"\t\t"x"'])
        self.assertEqual(list(data.items()), [('"path"', '"C:\\Games\\"'), ('"next"', '"x"')])

    def test_quote_inside_value_is_syntax_error(self):
        with self.assertRaises(VdfSyntaxError):
            VdfParser.parse_text(['"a"\t\t"say \\"hi\\""'])


# ── Text encode ───────────────────────────────────────────────

class TestDumpText(unittest.TestCase):
    def test_layout(self):
        data = VdfMap()
        data['"a"'] = '"1"'
        data['"b"'] = VdfMap({'"c"': '"2"', '"d"': VdfMap({'"e"': '"3"'})})
        expected = (
            '"a"\t\t"1"\n'
            '"b"\n'
            '{\n'
            '\t"c"\t\t"2"\n'
            '\t"d"\n'
            '\t{\n'
            '\t\t"e"\t\t"3"\n'
            '\t}\n'
            '}\n'
        )
        self.assertEqual(VdfParser.dump_text(data), expected)

    def test_empty_map(self):
        self.assertEqual(VdfParser.dump_text({}), "\n")

    def test_round_trip_keeps_order(self):
        data = VdfMap()
        data['"z"'] = '"last letter"'
        data['"a"'] = VdfMap({'"2"': '"two"', '"1"': '"one"'})
        data['"m"'] = '"D:\\Steam\\steamapps\\"'
        decoded = VdfParser.parse_text(VdfParser.dump_text(data).splitlines())
        self.assertEqual(decoded, data)
        self.assertEqual(list(decoded), ['"z"', '"a"', '"m"'])
        self.assertEqual(list(decoded['"a"']), ['"2"', '"1"'])

    def test_non_string_leaf_rejected(self):
        with self.assertRaises(VdfInvalidValueError):
            VdfParser.dump_text({'"n"': UInt32(1)})


# ── Binary decode / encode ────────────────────────────────────

class TestBinary(unittest.TestCase):
    def test_empty_shortcuts_file(self):
        encoded = VdfParser.dump_binary({"shortcuts": {}})
        self.assertEqual(encoded, SHORTCUTS_SKELETON)
        self.assertEqual(len(encoded), 13)

    def test_parse_empty_shortcuts_file(self):
        data = VdfParser.parse_binary(SHORTCUTS_SKELETON)
        self.assertEqual(data, {"shortcuts": {}})
        self.assertIsInstance(data["shortcuts"], VdfMap)

    def test_scalar_layout(self):
        self.assertEqual(VdfParser.dump_binary({"a": UInt32(1)}), b"\x02a\x00\x01\x00\x00\x00\x08")
        self.assertEqual(VdfParser.dump_binary({"f": Float32(1.0)}), b"\x03f\x00\x00\x00\x80\x3f\x08")
        self.assertEqual(
            VdfParser.dump_binary({"q": UInt64(1)}),
            b"\x07q\x00" + (1).to_bytes(8, "little") + b"\x08",
        )
        self.assertEqual(VdfParser.dump_binary({"s": "hi"}), b"\x01s\x00hi\x00\x08")

    def test_round_trip_all_kinds(self):
        data = VdfMap()
        data["text"] = "héllo ✓"
        data["u32"] = UInt32(0xFFFFFFFF)
        data["u64"] = UInt64(2 ** 64 - 1)
        data["f32"] = Float32(3.14159)
        data["nested"] = VdfMap({"1": VdfMap({"deep": UInt32(0)}), "0": ""})

        decoded = VdfParser.parse_binary(VdfParser.dump_binary(data))

        self.assertEqual(decoded, data)
        self.assertEqual(list(decoded), ["text", "u32", "u64", "f32", "nested"])
        self.assertEqual(list(decoded["nested"]), ["1", "0"])
        self.assertIsInstance(decoded["u32"], UInt32)
        self.assertIsInstance(decoded["u64"], UInt64)
        self.assertIsInstance(decoded["f32"], Float32)
        self.assertEqual(decoded["f32"], struct.unpack("<f", struct.pack("<f", 3.14159))[0])

    def test_latin1_names(self):
        encoded = VdfParser.dump_binary({"café": "x"})
        self.assertEqual(encoded, b"\x01caf\xe9\x00x\x00\x08")
        self.assertEqual(VdfParser.parse_binary(encoded), {"café": "x"})

    def test_non_latin1_name_rejected(self):
        with self.assertRaises(VdfInvalidValueError):
            VdfParser.dump_binary({"✓": "x"})

    def test_invalid_utf8_survives_round_trip(self):
        raw = b"\x01s\x00\xff\xfe\x00\x08"
        self.assertEqual(VdfParser.dump_binary(VdfParser.parse_binary(raw)), raw)

    def test_offset(self):
        data = VdfParser.parse_binary(b"junk" + SHORTCUTS_SKELETON, offset=4)
        self.assertEqual(data, {"shortcuts": {}})

    def test_trailing_bytes_ignored(self):
        data = VdfParser.parse_binary(SHORTCUTS_SKELETON + b"\x00\x00")
        self.assertEqual(data, {"shortcuts": {}})


class TestEndianness(unittest.TestCase):
    """Numbers are stored little-endian whatever the host's byte order is."""

    VALUES = VdfMap({"u32": UInt32(0x01020304), "u64": UInt64(0x0102030405060708), "f32": Float32(-2.5)})

    @staticmethod
    def _buffer(u32, u64, f32):
        return (b"\x02u32\x00" + u32 + b"\x07u64\x00" + u64 + b"\x03f32\x00" + f32 + b"\x08")

    def test_encoded_layout_is_little_endian(self):
        expected = self._buffer(
            (0x01020304).to_bytes(4, "little"),
            (0x0102030405060708).to_bytes(8, "little"),
            b"\x00\x00\x20\xc0",
        )
        self.assertEqual(VdfParser.dump_binary(self.VALUES), expected)

    def test_little_endian_host_bytes(self):
        raw = self._buffer(struct.pack("<I", 0x01020304), struct.pack("<Q", 0x0102030405060708),
                           struct.pack("<f", -2.5))
        self.assertEqual(VdfParser.parse_binary(raw), self.VALUES)

    def test_big_endian_host_bytes_reversed(self):
        # A big-endian host packs natively with '>' and reverses before writing.
        raw = self._buffer(struct.pack(">I", 0x01020304)[::-1], struct.pack(">Q", 0x0102030405060708)[::-1],
                           struct.pack(">f", -2.5)[::-1])
        self.assertEqual(VdfParser.parse_binary(raw), self.VALUES)

    def test_unreversed_big_endian_bytes_read_differently(self):
        raw = self._buffer(struct.pack(">I", 0x01020304), struct.pack(">Q", 0x0102030405060708),
                           struct.pack(">f", -2.5))
        decoded = VdfParser.parse_binary(raw)
        self.assertEqual(decoded["u32"], 0x04030201)
        self.assertEqual(decoded["u64"], 0x0807060504030201)
        self.assertNotEqual(decoded["f32"], -2.5)


class TestBinaryErrors(unittest.TestCase):
    def test_null_in_string_rejected(self):
        with self.assertRaises(VdfInvalidValueError):
            VdfParser.dump_binary({"s": "a\x00b"})

    def test_invalid_value_is_value_error(self):
        with self.assertRaises(ValueError):
            VdfParser.dump_binary({"s": "a\x00b"})

    def test_lone_surrogate_rejected(self):
        with self.assertRaises(VdfInvalidValueError) as ctx:
            VdfParser.dump_binary({"name": "\ud800"})
        self.assertIn("name", str(ctx.exception))

    def test_null_in_key_rejected(self):
        with self.assertRaises(VdfInvalidValueError):
            VdfParser.dump_binary({"a\x00": "b"})

    def test_plain_int_rejected(self):
        with self.assertRaises(VdfInvalidValueError) as ctx:
            VdfParser.dump_binary({"count": 5})
        self.assertIn("count", str(ctx.exception))
        self.assertIn("int", str(ctx.exception))

    def test_other_types_rejected(self):
        for value in (True, b"raw", 1.5, None, ["list"]):
            with self.subTest(value=value):
                with self.assertRaises(VdfInvalidValueError):
                    VdfParser.dump_binary({"v": value})

    def test_missing_final_end_byte(self):
        with self.assertRaises(VdfBoundsError) as ctx:
            VdfParser.parse_binary(SHORTCUTS_SKELETON[:-1])
        self.assertEqual(ctx.exception.code, ERR_BOUNDS)

    def test_empty_buffer(self):
        with self.assertRaises(VdfBoundsError):
            VdfParser.parse_binary(b"")

    def test_unterminated_name(self):
        with self.assertRaises(VdfBoundsError):
            VdfParser.parse_binary(b"\x01abc")

    def test_unterminated_string_value(self):
        with self.assertRaises(VdfBoundsError):
            VdfParser.parse_binary(b"\x01a\x00value")

    def test_truncated_numbers(self):
        for raw in (b"\x02a\x00\x01\x00", b"\x03a\x00\x01", b"\x07a\x00\x01\x02\x03\x04\x05\x06\x07"):
            with self.subTest(raw=raw):
                with self.assertRaises(VdfBoundsError):
                    VdfParser.parse_binary(raw)

    def test_unknown_type(self):
        with self.assertRaises(VdfUnknownTypeError) as ctx:
            VdfParser.parse_binary(b"\x05a\x00\x08")
        self.assertEqual(ctx.exception.type_byte, 5)
        self.assertEqual(ctx.exception.offset, 0)
        self.assertIn("5", str(ctx.exception))


class TestFiles(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_binary_file(self):
        path = os.path.join(self.dir, "shortcuts.vdf")
        VdfParser.save_binary(path, {"shortcuts": {}})
        with open(path, "rb") as f:
            self.assertEqual(f.read(), SHORTCUTS_SKELETON)
        self.assertEqual(VdfParser.load_binary(path), {"shortcuts": {}})

    def test_missing_binary_file_uses_default(self):
        default = VdfMap({"shortcuts": VdfMap()})
        loaded = VdfParser.load_binary(os.path.join(self.dir, "missing.vdf"), default=default)
        self.assertEqual(loaded, default)
        loaded["shortcuts"]["0"] = VdfMap()
        self.assertEqual(default["shortcuts"], {})

    def test_failed_encode_leaves_no_file(self):
        path = os.path.join(self.dir, "bad.vdf")
        with self.assertRaises(VdfInvalidValueError):
            VdfParser.save_binary(path, {"bad": 1})
        self.assertFalse(os.path.exists(path))

    def test_text_file(self):
        path = os.path.join(self.dir, "config.vdf")
        data = VdfMap({'"root"': VdfMap({'"k"': '"v"'})})
        VdfParser.save_text(path, data)
        with open(path, "r", encoding="utf-8") as f:
            self.assertEqual(f.read(), '"root"\n{\n\t"k"\t\t"v"\n}\n')
        self.assertEqual(VdfParser.load_text(path), data)


if __name__ == "__main__":
    unittest.main()
