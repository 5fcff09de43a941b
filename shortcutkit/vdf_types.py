import struct
from enum import IntEnum
from typing import Any, Mapping, Optional, Union

from shortcutkit.errors import VdfInvalidValueError


class VdfType(IntEnum):
    """Type tags of the binary KeyValues format."""
    MAP = 0x00  # also the string terminator
    STRING = 0x01
    UINT32 = 0x02
    FLOAT32 = 0x03
    UINT64 = 0x07
    END = 0x08


class _UInt(int):
    BITS = 0

    def __new__(cls, value=0):
        obj = super().__new__(cls, value)
        if obj < 0 or obj >= 1 << cls.BITS:
            raise VdfInvalidValueError(f"{value!r} does not fit in {cls.__name__}")
        return obj

    def __repr__(self):
        return f"{type(self).__name__}({int(self)})"


class UInt32(_UInt):
    """Unsigned 32-bit integer value (binary type 2)."""

    BITS = 32


class UInt64(_UInt):
    """Unsigned 64-bit integer value (binary type 7)."""

    BITS = 64


class Float32(float):
    """
    Single precision float (binary type 3).
    The value is rounded to float32 on construction so that it compares
    equal to what comes back out of the binary codec.
    """

    def __new__(cls, value=0.0):
        try:
            rounded = struct.unpack('<f', struct.pack('<f', float(value)))[0]
        except (OverflowError, struct.error) as e:
            raise VdfInvalidValueError(f"{value!r} does not fit in Float32: {e}")
        return super().__new__(cls, rounded)

    def __repr__(self):
        return f"Float32({float(self)!r})"


class VdfMap(dict):
    """
    Insertion-ordered map shared by the text and binary codecs.

    A plain dict already keeps insertion order and O(1) lookups; this class
    only adds the accessor names the editors use. Setting an existing key
    keeps its original position.
    """

    def set(self, key: str, value: "VdfValue") -> None:
        self[key] = value

    def contains(self, key: str) -> bool:
        return key in self

    def count(self) -> int:
        return len(self)


VdfValue = Union[str, UInt32, UInt64, Float32, VdfMap]


def last_key(data: Mapping[str, Any]) -> Optional[str]:
    """Key of the most recently inserted entry, or None when empty."""
    return next(reversed(data.keys()), None)
