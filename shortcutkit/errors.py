"""Exceptions raised by the VDF codecs and the shortcut editors.

Every exception carries a stable ``.code`` string so callers (and tests) can
branch on the failure kind without matching message text.
"""

from typing import Optional

ERR_SYNTAX = "ERR_SYNTAX"                # text line matches no grammar shape
ERR_BOUNDS = "ERR_BOUNDS"                # read past the end of a binary buffer
ERR_UNKNOWN_TYPE = "ERR_UNKNOWN_TYPE"    # binary type byte not recognised
ERR_INVALID_VALUE = "ERR_INVALID_VALUE"  # value cannot be encoded
ERR_PRECONDITION = "ERR_PRECONDITION"    # shortcut set has the wrong shape


class VdfError(Exception):
    """Base class for every error raised by shortcutkit."""

    code = "ERR_VDF"

    def __init__(self, msg: str = "") -> None:
        super().__init__(msg or self.code)


class VdfSyntaxError(VdfError):
    """A text VDF line matched none of the accepted shapes."""

    code = ERR_SYNTAX

    def __init__(self, line: int, text: str) -> None:
        super().__init__(f"Invalid VDF syntax at line {line}: {text!r}")
        self.line = line
        self.text = text


class VdfBoundsError(VdfError, IndexError):
    code = ERR_BOUNDS


class VdfUnknownTypeError(VdfError):
    code = ERR_UNKNOWN_TYPE

    def __init__(self, type_byte: int, offset: Optional[int] = None) -> None:
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(f"Unknown VDF type byte {type_byte}{where}")
        self.type_byte = type_byte
        self.offset = offset


class VdfInvalidValueError(VdfError, ValueError):
    code = ERR_INVALID_VALUE


class ShortcutSetError(VdfError):
    """The shortcut set handed to the editor cannot be edited."""

    code = ERR_PRECONDITION
