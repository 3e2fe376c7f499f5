"""Value types and primitive parsers for Neovim UI (redraw) events."""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

log = logging.getLogger(__name__)

_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class ParseError(ValueError):
    """Raised when an event or one of its values has an unexpected shape.

    ``kind`` names what was expected (``"array"``, ``"u64"``, ``"event"``, ...)
    and ``value`` holds the offending value.
    """

    def __init__(self, kind: str, value: Any) -> None:
        self.kind = kind
        self.value = value
        detail = value if kind == "event" and isinstance(value, str) else repr(value)
        super().__init__(f"invalid {kind} format {detail}")


@dataclass(frozen=True)
class Color:
    """An RGBA colour with components in ``0.0..=1.0``."""

    r: float
    g: float
    b: float
    a: float = 1.0


@dataclass
class Colors:
    foreground: Color | None = None
    background: Color | None = None
    special: Color | None = None


class UnderlineStyle(enum.Enum):
    UNDERLINE = "underline"
    UNDERCURL = "undercurl"
    UNDERDOT = "underdot"
    UNDERDASH = "underdash"
    UNDERDOUBLE = "underdouble"


@dataclass
class Style:
    colors: Colors = field(default_factory=Colors)
    reverse: bool = False
    italic: bool = False
    bold: bool = False
    strikethrough: bool = False
    blend: int = 0
    underline: UnderlineStyle | None = None


@dataclass
class CursorMode:
    """Cursor settings for one editor mode; ``shape`` is the raw shape name."""

    shape: str | None = None
    cell_percentage: float | None = None
    blinkwait: int | None = None
    blinkon: int | None = None
    blinkoff: int | None = None
    style_id: int | None = None


@dataclass(frozen=True)
class GridLineCell:
    text: str
    highlight_id: int | None = None
    repeat: int | None = None


class MessageKind(enum.Enum):
    UNKNOWN = "unknown"
    CONFIRM = "confirm"
    CONFIRM_SUBSTITUTE = "confirm_sub"
    ERROR = "emsg"
    ECHO = "echo"
    ECHO_MESSAGE = "echomsg"
    ECHO_ERROR = "echoerr"
    LUA_ERROR = "lua_error"
    RPC_ERROR = "rpc_error"
    RETURN_PROMPT = "return_prompt"
    QUICK_FIX = "quickfix"
    SEARCH_COUNT = "search_count"
    WARNING = "wmsg"

    @classmethod
    def parse(cls, kind: str) -> MessageKind:
        """Map a message kind name to a member; unrecognised names give UNKNOWN."""
        try:
            return cls(kind)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class GuiOption:
    """A UI option as sent by ``option_set``: its name and parsed value."""

    name: str
    value: Any


class WindowAnchor(enum.Enum):
    NORTH_WEST = "NW"
    NORTH_EAST = "NE"
    SOUTH_WEST = "SW"
    SOUTH_EAST = "SE"


class EditorMode(enum.Enum):
    NORMAL = "normal"
    INSERT = "insert"
    VISUAL = "visual"
    REPLACE = "replace"
    CMDLINE = "cmdline_normal"
    UNKNOWN = "unknown"


def unpack_color(packed_color: int) -> Color:
    """Turn a packed ``0xRRGGBB`` integer into an opaque colour."""
    packed = packed_color & 0xFFFF_FFFF
    r = (packed & 0x00FF_0000) >> 16
    g = (packed & 0xFF00) >> 8
    b = packed & 0xFF
    return Color(r / 255.0, g / 255.0, b / 255.0, 1.0)


def extract_values(
    values: Sequence[Any], required: int, optional: int = 0
) -> tuple[list[Any], list[Any]]:
    """Split event arguments into required and optional values.

    Returns the first ``required`` values and up to ``optional`` values after
    them; only the optional values actually present are returned. Raises
    ParseError when fewer than ``required`` values are given.
    """
    values = list(values)
    if required > len(values):
        raise ParseError("event", repr(values))
    return values[:required], values[required : required + optional]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_array(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    raise ParseError("array", value)


def parse_map(value: Any) -> list[tuple[Any, Any]]:
    """Return the entries of a map, given as a dict or a list of pairs."""
    if isinstance(value, Mapping):
        return list(value.items())
    if isinstance(value, (list, tuple)) and all(
        isinstance(entry, (list, tuple)) and len(entry) == 2 for entry in value
    ):
        return [(key, item) for key, item in value]
    raise ParseError("map", value)


def parse_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise ParseError("string", value)


def parse_u64(value: Any) -> int:
    if _is_int(value) and 0 <= value <= _U64_MAX:
        return value
    raise ParseError("u64", value)


def parse_i64(value: Any) -> int:
    if _is_int(value) and _I64_MIN <= value <= _I64_MAX:
        return value
    raise ParseError("i64", value)


def parse_f64(value: Any) -> float:
    if _is_int(value) or isinstance(value, float):
        return float(value)
    raise ParseError("f64", value)


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise ParseError("bool", value)


_COLOR_ATTRIBUTES = ("foreground", "background", "special")
_FLAG_ATTRIBUTES = ("reverse", "italic", "bold", "strikethrough")
_UNDERLINE_ATTRIBUTES = {
    "underline": UnderlineStyle.UNDERLINE,
    "undercurl": UnderlineStyle.UNDERCURL,
    "underdotted": UnderlineStyle.UNDERDOT,
    "underdot": UnderlineStyle.UNDERDOT,
    "underdashed": UnderlineStyle.UNDERDASH,
    "underdash": UnderlineStyle.UNDERDASH,
    "underdouble": UnderlineStyle.UNDERDOUBLE,
    "underlineline": UnderlineStyle.UNDERDOUBLE,
}


def parse_style(style_map: Any) -> Style:
    """Build a Style from an ``hl_attr_define`` attribute map.

    Attributes with an unknown name or a value of the wrong type are ignored.
    """
    style = Style()
    for name, value in parse_map(style_map):
        if not isinstance(name, str):
            log.debug("Invalid attribute format")
            continue
        if name in _COLOR_ATTRIBUTES and _is_int(value):
            setattr(style.colors, name, unpack_color(parse_u64(value)))
        elif name in _FLAG_ATTRIBUTES and isinstance(value, bool):
            setattr(style, name, value)
        elif name == "blend" and _is_int(value):
            style.blend = parse_u64(value) & 0xFF
        elif name in _UNDERLINE_ATTRIBUTES and value is True:
            style.underline = _UNDERLINE_ATTRIBUTES[name]
        else:
            log.debug("Ignored style attribute: %s", name)
    return style


def parse_window_anchor(value: Any) -> WindowAnchor:
    text = parse_string(value)
    try:
        return WindowAnchor(text)
    except ValueError:
        raise ParseError("window anchor", text) from None


def parse_styled_content(line: Any) -> list[tuple[int, str]]:
    """Parse ``[[style_id, text], ...]`` into a list of pairs."""
    content = []
    for chunk in parse_array(line):
        (style_id, text), _ = extract_values(parse_array(chunk), 2)
        content.append((parse_u64(style_id), parse_string(text)))
    return content