"""Redraw events sent by Neovim's UI protocol and the parser for them."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from nvbridge.events import (
    Colors,
    CursorMode,
    EditorMode,
    GridLineCell,
    GuiOption,
    MessageKind,
    ParseError,
    Style,
    WindowAnchor,
    extract_values,
    parse_array,
    parse_bool,
    parse_f64,
    parse_i64,
    parse_map,
    parse_string,
    parse_style,
    parse_styled_content,
    parse_u64,
    parse_window_anchor,
    unpack_color,
)

log = logging.getLogger(__name__)

StyledContent = list[tuple[int, str]]


class RedrawEvent:
    """Base class of every parsed redraw event."""


@dataclass(frozen=True)
class SetTitle(RedrawEvent):
    title: str


@dataclass(frozen=True)
class ModeInfoSet(RedrawEvent):
    cursor_modes: list[CursorMode] = field(default_factory=list)


@dataclass(frozen=True)
class OptionSet(RedrawEvent):
    gui_option: GuiOption


@dataclass(frozen=True)
class ModeChange(RedrawEvent):
    """A mode change; ``mode_name`` keeps the name sent, also for unknown modes."""

    mode: EditorMode
    mode_index: int
    mode_name: str = ""


@dataclass(frozen=True)
class SimpleEvent(RedrawEvent):
    """An event without arguments, such as ``flush`` or ``mouse_on``."""

    kind: str


@dataclass(frozen=True)
class Resize(RedrawEvent):
    grid: int
    width: int
    height: int


@dataclass(frozen=True)
class DefaultColorsSet(RedrawEvent):
    colors: Colors


@dataclass(frozen=True)
class HighlightAttributesDefine(RedrawEvent):
    id: int
    style: Style


@dataclass(frozen=True)
class GridLine(RedrawEvent):
    grid: int
    row: int
    column_start: int
    cells: list[GridLineCell] = field(default_factory=list)


@dataclass(frozen=True)
class Clear(RedrawEvent):
    grid: int


@dataclass(frozen=True)
class Destroy(RedrawEvent):
    grid: int


@dataclass(frozen=True)
class CursorGoto(RedrawEvent):
    grid: int
    row: int
    column: int


@dataclass(frozen=True)
class Scroll(RedrawEvent):
    grid: int
    top: int
    bottom: int
    left: int
    right: int
    rows: int
    columns: int


@dataclass(frozen=True)
class WindowPosition(RedrawEvent):
    grid: int
    start_row: int
    start_column: int
    width: int
    height: int


@dataclass(frozen=True)
class WindowFloatPosition(RedrawEvent):
    grid: int
    anchor: WindowAnchor
    anchor_grid: int
    anchor_row: float
    anchor_column: float
    focusable: bool
    z_index: int


@dataclass(frozen=True)
class WindowExternalPosition(RedrawEvent):
    grid: int


@dataclass(frozen=True)
class WindowHide(RedrawEvent):
    grid: int


@dataclass(frozen=True)
class WindowClose(RedrawEvent):
    grid: int


@dataclass(frozen=True)
class MessageSetPosition(RedrawEvent):
    grid: int
    row: int
    scrolled: bool
    separator_character: str


@dataclass(frozen=True)
class WindowViewport(RedrawEvent):
    grid: int
    top_line: float
    bottom_line: float
    current_line: float
    current_column: float
    line_count: float | None = None
    scroll_delta: float | None = None


@dataclass(frozen=True)
class WindowViewportMargins(RedrawEvent):
    grid: int
    top: int
    bottom: int
    left: int
    right: int


@dataclass(frozen=True)
class CommandLineShow(RedrawEvent):
    content: StyledContent
    position: int
    first_character: str
    prompt: str
    indent: int
    level: int


@dataclass(frozen=True)
class CommandLinePosition(RedrawEvent):
    position: int
    level: int


@dataclass(frozen=True)
class CommandLineSpecialCharacter(RedrawEvent):
    character: str
    shift: bool
    level: int


@dataclass(frozen=True)
class CommandLineBlockShow(RedrawEvent):
    lines: list[StyledContent] = field(default_factory=list)


@dataclass(frozen=True)
class CommandLineBlockAppend(RedrawEvent):
    line: StyledContent = field(default_factory=list)


@dataclass(frozen=True)
class MessageShow(RedrawEvent):
    kind: MessageKind
    content: StyledContent
    replace_last: bool


@dataclass(frozen=True)
class MessageShowMode(RedrawEvent):
    content: StyledContent = field(default_factory=list)


@dataclass(frozen=True)
class MessageShowCommand(RedrawEvent):
    content: StyledContent = field(default_factory=list)


@dataclass(frozen=True)
class MessageRuler(RedrawEvent):
    content: StyledContent = field(default_factory=list)


@dataclass(frozen=True)
class MessageHistoryShow(RedrawEvent):
    entries: list[tuple[MessageKind, StyledContent]] = field(default_factory=list)


def _required(arguments: list[Any], count: int) -> list[Any]:
    values, _ = extract_values(arguments, count)
    return values


def _parse_set_title(arguments: list[Any]) -> RedrawEvent:
    (title,) = _required(arguments, 1)
    return SetTitle(parse_string(title))


_CURSOR_FIELDS: dict[str, Callable[[CursorMode, Any], None]] = {
    "cursor_shape": lambda mode, v: setattr(mode, "shape", parse_string(v)),
    "cell_percentage": lambda mode, v: setattr(
        mode, "cell_percentage", parse_u64(v) / 100.0
    ),
    "blinkwait": lambda mode, v: setattr(mode, "blinkwait", parse_u64(v)),
    "blinkon": lambda mode, v: setattr(mode, "blinkon", parse_u64(v)),
    "blinkoff": lambda mode, v: setattr(mode, "blinkoff", parse_u64(v)),
    "attr_id": lambda mode, v: setattr(mode, "style_id", parse_u64(v)),
}


def _parse_mode_info_set(arguments: list[Any]) -> RedrawEvent:
    _cursor_style_enabled, mode_info = _required(arguments, 2)
    cursor_modes = []
    for info in parse_array(mode_info):
        mode = CursorMode()
        for name, value in parse_map(info):
            setter = _CURSOR_FIELDS.get(parse_string(name))
            if setter is not None:
                setter(mode, value)
        cursor_modes.append(mode)
    return ModeInfoSet(cursor_modes)


_OPTION_PARSERS: dict[str, Callable[[Any], Any]] = {
    "arabicshape": parse_bool,
    "ambiwidth": parse_string,
    "emoji": parse_bool,
    "guifont": parse_string,
    "guifontset": parse_string,
    "guifontwide": parse_string,
    "linespace": parse_f64,
    "pumblend": parse_u64,
    "showtabline": parse_u64,
    "termguicolors": parse_bool,
}


def _parse_option_set(arguments: list[Any]) -> RedrawEvent:
    name, value = _required(arguments, 2)
    name = parse_string(name)
    parser = _OPTION_PARSERS.get(name)
    parsed = parser(value) if parser is not None else value
    return OptionSet(GuiOption(name, parsed))


def _parse_mode_change(arguments: list[Any]) -> RedrawEvent:
    mode, mode_index = _required(arguments, 2)
    mode_name = parse_string(mode)
    try:
        editor_mode = EditorMode(mode_name)
    except ValueError:
        editor_mode = EditorMode.UNKNOWN
    return ModeChange(editor_mode, parse_u64(mode_index), mode_name)


def _parse_grid_resize(arguments: list[Any]) -> RedrawEvent:
    grid, width, height = _required(arguments, 3)
    return Resize(parse_u64(grid), parse_u64(width), parse_u64(height))


def _parse_default_colors(arguments: list[Any]) -> RedrawEvent:
    foreground, background, special, _term_fg, _term_bg = _required(arguments, 5)
    return DefaultColorsSet(
        Colors(
            foreground=unpack_color(parse_u64(foreground)),
            background=unpack_color(parse_u64(background)),
            special=unpack_color(parse_u64(special)),
        )
    )


def _parse_hl_attr_define(arguments: list[Any]) -> RedrawEvent:
    hl_id, attributes, _terminal_attributes, _infos = _required(arguments, 4)
    style = parse_style(attributes)
    return HighlightAttributesDefine(parse_u64(hl_id), style)


def _parse_grid_line_cell(cell: Any) -> GridLineCell:
    contents = parse_array(cell)
    if not contents:
        raise ParseError("event", repr(contents))
    highlight_id = parse_u64(contents[1]) if len(contents) > 1 else None
    repeat = parse_u64(contents[2]) if len(contents) > 2 else None
    return GridLineCell(parse_string(contents[0]), highlight_id, repeat)


def _parse_grid_line(arguments: list[Any]) -> RedrawEvent:
    grid, row, column_start, cells = _required(arguments, 4)
    return GridLine(
        parse_u64(grid),
        parse_u64(row),
        parse_u64(column_start),
        [_parse_grid_line_cell(cell) for cell in parse_array(cells)],
    )


def _parse_grid_clear(arguments: list[Any]) -> RedrawEvent:
    (grid,) = _required(arguments, 1)
    return Clear(parse_u64(grid))


def _parse_grid_destroy(arguments: list[Any]) -> RedrawEvent:
    (grid,) = _required(arguments, 1)
    return Destroy(parse_u64(grid))


def _non_negative(value: int, what: str) -> int:
    if value < 0:
        log.warning("Negative cursor %s received from Neovim %d", what, value)
        return 0
    return value


def _parse_grid_cursor_goto(arguments: list[Any]) -> RedrawEvent:
    grid, row, column = _required(arguments, 3)
    grid_id = parse_u64(grid)
    return CursorGoto(
        grid_id,
        _non_negative(parse_i64(row), "row"),
        _non_negative(parse_i64(column), "column"),
    )


def _parse_grid_scroll(arguments: list[Any]) -> RedrawEvent:
    grid, top, bottom, left, right, rows, columns = _required(arguments, 7)
    return Scroll(
        parse_u64(grid),
        parse_u64(top),
        parse_u64(bottom),
        parse_u64(left),
        parse_u64(right),
        parse_i64(rows),
        parse_i64(columns),
    )


def _parse_win_pos(arguments: list[Any]) -> RedrawEvent:
    grid, _window, start_row, start_column, width, height = _required(arguments, 6)
    return WindowPosition(
        parse_u64(grid),
        parse_u64(start_row),
        parse_u64(start_column),
        parse_u64(width),
        parse_u64(height),
    )


def _parse_win_float_pos(arguments: list[Any]) -> RedrawEvent:
    (
        grid,
        _window,
        anchor,
        anchor_grid,
        anchor_row,
        anchor_column,
        focusable,
        z_index,
    ) = _required(arguments, 8)
    return WindowFloatPosition(
        parse_u64(grid),
        parse_window_anchor(anchor),
        parse_u64(anchor_grid),
        parse_f64(anchor_row),
        parse_f64(anchor_column),
        parse_bool(focusable),
        parse_u64(z_index),
    )


def _parse_win_external_pos(arguments: list[Any]) -> RedrawEvent:
    grid, _window = _required(arguments, 2)
    return WindowExternalPosition(parse_u64(grid))


def _parse_win_hide(arguments: list[Any]) -> RedrawEvent:
    (grid,) = _required(arguments, 1)
    return WindowHide(parse_u64(grid))


def _parse_win_close(arguments: list[Any]) -> RedrawEvent:
    (grid,) = _required(arguments, 1)
    return WindowClose(parse_u64(grid))


def _parse_msg_set_pos(arguments: list[Any]) -> RedrawEvent:
    grid, row, scrolled, separator = _required(arguments, 4)
    return MessageSetPosition(
        parse_u64(grid), parse_u64(row), parse_bool(scrolled), parse_string(separator)
    )


def _parse_win_viewport(arguments: list[Any]) -> RedrawEvent:
    required, optional = extract_values(arguments, 6, 2)
    grid, _window, top_line, bottom_line, current_line, current_column = required
    optional_values = [parse_f64(value) for value in optional]
    optional_values += [None] * (2 - len(optional_values))
    line_count, scroll_delta = optional_values
    return WindowViewport(
        parse_u64(grid),
        parse_f64(top_line),
        parse_f64(bottom_line),
        parse_f64(current_line),
        parse_f64(current_column),
        line_count,
        scroll_delta,
    )


def _parse_win_viewport_margins(arguments: list[Any]) -> RedrawEvent:
    grid, _window, top, bottom, left, right = _required(arguments, 6)
    return WindowViewportMargins(
        parse_u64(grid), parse_u64(top), parse_u64(bottom), parse_u64(left), parse_u64(right)
    )


def _parse_cmdline_show(arguments: list[Any]) -> RedrawEvent:
    content, position, first_character, prompt, indent, level = _required(arguments, 6)
    return CommandLineShow(
        parse_styled_content(content),
        parse_u64(position),
        parse_string(first_character),
        parse_string(prompt),
        parse_u64(indent),
        parse_u64(level),
    )


def _parse_cmdline_pos(arguments: list[Any]) -> RedrawEvent:
    position, level = _required(arguments, 2)
    return CommandLinePosition(parse_u64(position), parse_u64(level))


def _parse_cmdline_special_char(arguments: list[Any]) -> RedrawEvent:
    character, shift, level = _required(arguments, 3)
    return CommandLineSpecialCharacter(
        parse_string(character), parse_bool(shift), parse_u64(level)
    )


def _parse_cmdline_block_show(arguments: list[Any]) -> RedrawEvent:
    (lines,) = _required(arguments, 1)
    return CommandLineBlockShow([parse_styled_content(line) for line in parse_array(lines)])


def _parse_cmdline_block_append(arguments: list[Any]) -> RedrawEvent:
    (line,) = _required(arguments, 1)
    return CommandLineBlockAppend(parse_styled_content(line))


def _parse_msg_show(arguments: list[Any]) -> RedrawEvent:
    kind, content, replace_last = _required(arguments, 3)
    return MessageShow(
        MessageKind.parse(parse_string(kind)),
        parse_styled_content(content),
        parse_bool(replace_last),
    )


def _parse_msg_showmode(arguments: list[Any]) -> RedrawEvent:
    (content,) = _required(arguments, 1)
    return MessageShowMode(parse_styled_content(content))


def _parse_msg_showcmd(arguments: list[Any]) -> RedrawEvent:
    (content,) = _required(arguments, 1)
    return MessageShowCommand(parse_styled_content(content))


def _parse_msg_ruler(arguments: list[Any]) -> RedrawEvent:
    (content,) = _required(arguments, 1)
    return MessageRuler(parse_styled_content(content))


def _parse_msg_history_entry(entry: Any) -> tuple[MessageKind, StyledContent]:
    kind, content = _required(parse_array(entry), 2)
    return MessageKind.parse(parse_string(kind)), parse_styled_content(content)


def _parse_msg_history_show(arguments: list[Any]) -> RedrawEvent:
    (entries,) = _required(arguments, 1)
    return MessageHistoryShow(
        [_parse_msg_history_entry(entry) for entry in parse_array(entries)]
    )


def _simple(kind: str) -> Callable[[list[Any]], RedrawEvent]:
    return lambda _arguments: SimpleEvent(kind)


_PARSERS: dict[str, Callable[[list[Any]], RedrawEvent | None]] = {
    "set_title": _parse_set_title,
    "set_icon": lambda _arguments: None,
    "mode_info_set": _parse_mode_info_set,
    "option_set": _parse_option_set,
    "mode_change": _parse_mode_change,
    "mouse_on": _simple("mouse_on"),
    "mouse_off": _simple("mouse_off"),
    "busy_start": _simple("busy_start"),
    "busy_stop": _simple("busy_stop"),
    "flush": _simple("flush"),
    "grid_resize": _parse_grid_resize,
    "default_colors_set": _parse_default_colors,
    "hl_attr_define": _parse_hl_attr_define,
    "grid_line": _parse_grid_line,
    "grid_clear": _parse_grid_clear,
    "grid_destroy": _parse_grid_destroy,
    "grid_cursor_goto": _parse_grid_cursor_goto,
    "grid_scroll": _parse_grid_scroll,
    "win_pos": _parse_win_pos,
    "win_float_pos": _parse_win_float_pos,
    "win_external_pos": _parse_win_external_pos,
    "win_hide": _parse_win_hide,
    "win_close": _parse_win_close,
    "msg_set_pos": _parse_msg_set_pos,
    "win_viewport": _parse_win_viewport,
    "win_viewport_margins": _parse_win_viewport_margins,
    "cmdline_show": _parse_cmdline_show,
    "cmdline_pos": _parse_cmdline_pos,
    "cmdline_special_char": _parse_cmdline_special_char,
    "cmdline_hide": _simple("cmdline_hide"),
    "cmdline_block_show": _parse_cmdline_block_show,
    "cmdline_block_append": _parse_cmdline_block_append,
    "cmdline_block_hide": _simple("cmdline_block_hide"),
    "msg_show": _parse_msg_show,
    "msg_clear": _simple("msg_clear"),
    "msg_showmode": _parse_msg_showmode,
    "msg_showcmd": _parse_msg_showcmd,
    "msg_ruler": _parse_msg_ruler,
    "msg_history_show": _parse_msg_history_show,
    "suspend": _simple("suspend"),
}


def parse_redraw_event(event_value: Any) -> list[RedrawEvent]:
    """Parse one ``[name, args1, args2, ...]`` batch of a redraw notification.

    Events with an unrecognised name are skipped; a malformed argument list
    raises ParseError naming the event.
    """
    contents = parse_array(event_value)
    if not contents:
        raise ParseError("event", repr(contents))
    event_name = parse_string(contents[0])
    parser = _PARSERS.get(event_name)

    parsed_events: list[RedrawEvent] = []
    for event in contents[1:]:
        parameters = parse_array(event)
        if parser is None:
            continue
        try:
            parsed = parser(list(parameters))
        except ParseError as error:
            raise ParseError(
                "event", f"for event '{event_name}' - {parameters!r} - {error}"
            ) from error
        if parsed is not None:
            parsed_events.append(parsed)
    return parsed_events