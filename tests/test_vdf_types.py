import os
import struct
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from shortcutkit.errors import VdfInvalidValueError
from shortcutkit.vdf_types import Float32, UInt32, UInt64, VdfMap, VdfType, last_key


class TestVdfType(unittest.TestCase):
    def test_tag_values(self):
        self.assertEqual(
            [int(t) for t in (VdfType.MAP, VdfType.STRING, VdfType.UINT32,
                              VdfType.FLOAT32, VdfType.UINT64, VdfType.END)],
            [0, 1, 2, 3, 7, 8],
        )


class TestNumbers(unittest.TestCase):
    def test_uint32_range(self):
        self.assertEqual(UInt32(0), 0)
        self.assertEqual(UInt32(2 ** 32 - 1), 4294967295)
        with self.assertRaises(VdfInvalidValueError):
            UInt32(-1)
        with self.assertRaises(VdfInvalidValueError):
            UInt32(2 ** 32)

    def test_uint64_range(self):
        self.assertEqual(UInt64(2 ** 64 - 1), 2 ** 64 - 1)
        with self.assertRaises(VdfInvalidValueError):
            UInt64(2 ** 64)

    def test_uint64_is_distinct_from_uint32(self):
        self.assertNotIsInstance(UInt32(1), UInt64)
        self.assertNotIsInstance(UInt64(1), UInt32)
        self.assertEqual(repr(UInt64(3)), "UInt64(3)")

    def test_float32_rounding(self):
        value = Float32(0.1)
        self.assertNotEqual(float(value), 0.1)
        self.assertEqual(value, struct.unpack("<f", struct.pack("<f", 0.1))[0])

    def test_float32_overflow(self):
        with self.assertRaises(VdfInvalidValueError):
            Float32(1e39)


class TestVdfMap(unittest.TestCase):
    def test_set_overwrites_in_place(self):
        m = VdfMap()
        m.set("a", "1")
        m.set("b", "2")
        m.set("a", "3")
        self.assertEqual(list(m), ["a", "b"])
        self.assertEqual(m.get("a"), "3")
        self.assertEqual(m.count(), 2)

    def test_contains_and_missing(self):
        m = VdfMap({"a": "1"})
        self.assertTrue(m.contains("a"))
        self.assertFalse(m.contains("b"))
        self.assertIsNone(m.get("b"))


class TestLastKey(unittest.TestCase):
    def test_empty(self):
        self.assertIsNone(last_key(VdfMap()))

    def test_insertion_order_not_numeric(self):
        m = VdfMap()
        m.set("5", "x")
        m.set("1", "y")
        self.assertEqual(last_key(m), "1")

    def test_plain_dict(self):
        self.assertEqual(last_key({"a": 1, "b": 2}), "b")


if __name__ == "__main__":
    unittest.main()
