import copy
import logging
import os
import re
import struct
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from shortcutkit.errors import (
    VdfBoundsError,
    VdfInvalidValueError,
    VdfSyntaxError,
    VdfUnknownTypeError,
)
from shortcutkit.vdf_types import Float32, UInt32, UInt64, VdfMap, VdfType

logger = logging.getLogger(__name__)

# One line of text VDF: a quoted key (optionally followed by a quoted value or
# an opening brace), or a lone brace. Backslashes are plain characters.
_QUOTED = r'"[^"]*"'
_LINE_PATTERN = re.compile(
    r'^\s*(?:(?P<key>' + _QUOTED + r')\s*(?:(?P<value>' + _QUOTED + r')|(?P<open>\{))?'
    r'|(?P<brace>[{}]))\s*$'
)

_UINT32 = struct.Struct('<I')
_UINT64 = struct.Struct('<Q')
_FLOAT32 = struct.Struct('<f')

# Strings are decoded with surrogateescape so invalid bytes survive a round trip.
_STRING_ERRORS = 'surrogateescape'


class _Cursor:
    """Line position shared by every level of the text decoder."""

    def __init__(self, index: int = 0):
        self.index = index


class _BinaryReader:
    """Walks a binary VDF buffer, one typed entry at a time."""

    def __init__(self, data: bytes, offset: int = 0):
        self.data = bytes(data)
        self.offset = offset

        self.value_parsers: Dict[int, Callable[[], Any]] = {
            VdfType.MAP: self.read_map,
            VdfType.STRING: self.read_string,
            VdfType.UINT32: lambda: UInt32(self.read_struct(_UINT32)),
            VdfType.FLOAT32: lambda: Float32(self.read_struct(_FLOAT32)),
            VdfType.UINT64: lambda: UInt64(self.read_struct(_UINT64)),
        }

    def read_byte(self) -> int:
        if self.offset >= len(self.data):
            raise VdfBoundsError(f"Buffer ended at offset {self.offset} before end-of-map marker")
        value = self.data[self.offset]
        self.offset += 1
        return value

    def read_cstring(self, encoding: str) -> str:
        end = self.data.find(b'\x00', self.offset)
        if end == -1:
            raise VdfBoundsError(f"Unterminated string at offset {self.offset}")
        raw = self.data[self.offset:end]
        self.offset = end + 1
        return raw.decode(encoding, errors=_STRING_ERRORS)

    def read_string(self) -> str:
        return self.read_cstring('utf-8')

    def read_struct(self, fmt: struct.Struct):
        end = self.offset + fmt.size
        if end > len(self.data):
            raise VdfBoundsError(
                f"Need {fmt.size} bytes at offset {self.offset}, only {len(self.data) - self.offset} left"
            )
        # Explicit '<' formats: the result never depends on host byte order.
        value = fmt.unpack_from(self.data, self.offset)[0]
        self.offset = end
        return value

    def read_map(self) -> VdfMap:
        result = VdfMap()
        while True:
            type_offset = self.offset
            type_byte = self.read_byte()
            if type_byte == VdfType.END:
                return result

            name = self.read_cstring('latin-1')
            parser = self.value_parsers.get(type_byte)
            if parser is None:
                raise VdfUnknownTypeError(type_byte, type_offset)
            result[name] = parser()


class VdfParser:
    """
    Reads and writes Steam VDF (Valve Data Format) data.
    Supports both Text VDF (e.g. configset_controller_neptune.vdf) and
    Binary VDF (e.g. shortcuts.vdf).

    Text keys and values keep their surrounding double quotes: '"name"' is
    stored as the five characters "name" plus both quote marks, and is
    written back out unchanged.
    """

    # ------------------------------------------------------------------ text

    @staticmethod
    def load_text(file_path: str) -> VdfMap:
        """Loads a text VDF file from disk."""
        with open(file_path, 'r', encoding='utf-8') as f:
            lines = f.read().splitlines()
        logger.debug(f"Read {len(lines)} lines from {file_path}")
        return VdfParser.parse_text(lines)

    @staticmethod
    def save_text(file_path: str, data: Mapping[str, Any]):
        content = VdfParser.dump_text(data)
        with open(file_path, 'w', encoding='utf-8', newline='\n') as f:
            f.write(content)
        logger.debug(f"Wrote text VDF to {file_path}")

    @staticmethod
    def parse_text(lines: Sequence[str]) -> VdfMap:
        """
        Parses text VDF lines into a VdfMap.
        Each line holds one token group: '"key" "value"', '"key"' (followed
        by a '{' line), '"key" {', '{' or '}'. Blank lines are skipped.
        """
        return VdfParser._parse_text_block(lines, _Cursor(), 0)

    @staticmethod
    def _parse_text_block(lines: Sequence[str], cursor: _Cursor, depth: int) -> VdfMap:
        result = VdfMap()

        while cursor.index < len(lines):
            index = cursor.index
            line = lines[index]
            if not line.strip():
                cursor.index += 1
                continue

            match = _LINE_PATTERN.match(line)
            if not match:
                raise VdfSyntaxError(index, line)

            brace = match.group('brace')
            if brace == '}':
                cursor.index += 1
                if depth == 0:
                    # Closing brace outside every block ends the document.
                    logger.debug(f"Unmatched '}}' at line {index}, stopping")
                return result
            if brace == '{':
                raise VdfSyntaxError(index, line)

            key = match.group('key')
            value = match.group('value')
            if value is not None:
                result[key] = value
                cursor.index += 1
                continue

            if match.group('open') is None:
                # A bare key must be followed by a line holding only '{'
                next_index = VdfParser._next_content_line(lines, index + 1)
                if next_index is None:
                    raise VdfSyntaxError(index, line)
                next_match = _LINE_PATTERN.match(lines[next_index])
                if not next_match or next_match.group('brace') != '{':
                    raise VdfSyntaxError(next_index, lines[next_index])
                cursor.index = next_index + 1
            else:
                cursor.index += 1

            result[key] = VdfParser._parse_text_block(lines, cursor, depth + 1)

        return result

    @staticmethod
    def _next_content_line(lines: Sequence[str], start: int) -> Optional[int]:
        for index in range(start, len(lines)):
            if lines[index].strip():
                return index
        return None

    @staticmethod
    def dump_text(data: Mapping[str, Any]) -> str:
        """Renders a map as text VDF, tab indented, with a trailing newline."""
        return '\n'.join(VdfParser._dump_text_lines(data, 0)) + '\n'

    @staticmethod
    def _dump_text_lines(data: Mapping[str, Any], depth: int) -> List[str]:
        indent = '\t' * depth
        lines = []
        for key, value in data.items():
            if not isinstance(key, str):
                raise VdfInvalidValueError(f"Text VDF keys must be str, got {type(key).__name__}")
            if isinstance(value, Mapping):
                lines.append(f"{indent}{key}")
                lines.append(f"{indent}{{")
                lines.extend(VdfParser._dump_text_lines(value, depth + 1))
                lines.append(f"{indent}}}")
            elif isinstance(value, str):
                lines.append(f"{indent}{key}\t\t{value}")
            else:
                raise VdfInvalidValueError(
                    f"Text VDF value for key {key} must be str or a map, got {type(value).__name__}"
                )
        return lines

    # ---------------------------------------------------------------- binary

    @staticmethod
    def load_binary(file_path: str, default: Optional[Mapping[str, Any]] = None) -> VdfMap:
        """
        Loads a binary VDF file (like shortcuts.vdf) from disk.
        A missing file yields a copy of `default` (or an empty map).
        """
        if not os.path.exists(file_path):
            logger.info(f"{file_path} does not exist, starting from an empty set")
            return copy.deepcopy(default) if default is not None else VdfMap()
        with open(file_path, 'rb') as f:
            return VdfParser.parse_binary(f.read())

    @staticmethod
    def save_binary(file_path: str, data: Mapping[str, Any]):
        # Encode first so a bad value never leaves a truncated file behind.
        payload = VdfParser.dump_binary(data)
        with open(file_path, 'wb') as f:
            f.write(payload)
        logger.debug(f"Wrote {len(payload)} bytes to {file_path}")

    @staticmethod
    def parse_binary(data: bytes, offset: int = 0) -> VdfMap:
        """
        Parses binary VDF data.
        Format:
        Type (1 byte) + Name (null-term Latin-1) + Value (depends on type)
        Types: 0=Map, 1=String, 2=UInt32, 3=Float32, 7=UInt64, 8=EndMap
        The buffer must end each map with an EndMap byte, the outermost included.
        """
        reader = _BinaryReader(data, offset)
        result = reader.read_map()
        logger.debug(f"Decoded {len(result)} top-level entries ({reader.offset - offset} bytes)")
        return result

    @staticmethod
    def dump_binary(data: Mapping[str, Any]) -> bytes:
        out = bytearray()
        VdfParser._dump_binary_map(data, out)
        return bytes(out)

    @staticmethod
    def _dump_binary_map(data: Mapping[str, Any], out: bytearray):
        for key, value in data.items():
            name = VdfParser._encode_name(key)

            if isinstance(value, Mapping):
                out.append(VdfType.MAP)
                out += name
                VdfParser._dump_binary_map(value, out)
            elif isinstance(value, str):
                if '\x00' in value:
                    raise VdfInvalidValueError(f"String value for key {key!r} contains a null byte")
                out.append(VdfType.STRING)
                out += name
                try:
                    out += value.encode('utf-8', errors=_STRING_ERRORS) + b'\x00'
                except UnicodeEncodeError as e:
                    raise VdfInvalidValueError(f"String value for key {key!r} is not encodable: {e}")
            elif isinstance(value, UInt64):
                out.append(VdfType.UINT64)
                out += name
                out += _UINT64.pack(value)
            elif isinstance(value, UInt32):
                out.append(VdfType.UINT32)
                out += name
                out += _UINT32.pack(value)
            elif isinstance(value, Float32):
                out.append(VdfType.FLOAT32)
                out += name
                out += _FLOAT32.pack(value)
            else:
                raise VdfInvalidValueError(
                    f"Cannot encode key {key!r}: unsupported type {type(value).__name__}"
                )
        out.append(VdfType.END)

    @staticmethod
    def _encode_name(key: Any) -> bytes:
        if not isinstance(key, str):
            raise VdfInvalidValueError(f"Binary VDF keys must be str, got {type(key).__name__}")
        if '\x00' in key:
            raise VdfInvalidValueError(f"Key {key!r} contains a null byte")
        try:
            return key.encode('latin-1') + b'\x00'
        except UnicodeEncodeError as e:
            raise VdfInvalidValueError(f"Key {key!r} is not Latin-1: {e}")
