import pytest

from nvbridge.events import (
    EditorMode,
    GridLineCell,
    GuiOption,
    MessageKind,
    ParseError,
    UnderlineStyle,
    WindowAnchor,
    unpack_color,
)
from nvbridge.redraw import (
    Clear,
    CommandLineBlockShow,
    CommandLinePosition,
    CommandLineShow,
    CursorGoto,
    DefaultColorsSet,
    Destroy,
    GridLine,
    HighlightAttributesDefine,
    MessageHistoryShow,
    MessageSetPosition,
    MessageShow,
    ModeChange,
    ModeInfoSet,
    OptionSet,
    Resize,
    Scroll,
    SetTitle,
    SimpleEvent,
    WindowClose,
    WindowFloatPosition,
    WindowPosition,
    WindowViewport,
    WindowViewportMargins,
    parse_redraw_event,
)


def test_set_title():
    assert parse_redraw_event(["set_title", ["my title"]]) == [SetTitle("my title")]


def test_multiple_batches_keep_order():
    events = parse_redraw_event(["grid_resize", [1, 80, 24], [2, 40, 10]])
    assert events == [Resize(1, 80, 24), Resize(2, 40, 10)]


@pytest.mark.parametrize(
    "name",
    ["mouse_on", "mouse_off", "busy_start", "busy_stop", "flush",
     "cmdline_hide", "cmdline_block_hide", "msg_clear", "suspend"],
)
def test_simple_events(name):
    assert parse_redraw_event([name, []]) == [SimpleEvent(name)]


def test_unknown_and_ignored_events_are_skipped():
    assert parse_redraw_event(["set_icon", ["icon"]]) == []
    assert parse_redraw_event(["not_an_event", [1, 2]]) == []


def test_mode_change_known_and_unknown():
    events = parse_redraw_event(["mode_change", ["insert", 1], ["operator", 3]])
    assert events[0] == ModeChange(EditorMode.INSERT, 1, "insert")
    assert events[1].mode is EditorMode.UNKNOWN
    assert events[1].mode_name == "operator"
    assert events[1].mode_index == 3


def test_cmdline_normal_mode():
    (event,) = parse_redraw_event(["mode_change", ["cmdline_normal", 2]])
    assert event.mode is EditorMode.CMDLINE


def test_mode_info_set():
    info = {"cursor_shape": "block", "blinkon": 400, "attr_id": 7, "cell_percentage": 100}
    (event,) = parse_redraw_event(["mode_info_set", [True, [info]]])
    assert isinstance(event, ModeInfoSet)
    (mode,) = event.cursor_modes
    assert mode.shape == "block"
    assert mode.blinkon == 400
    assert mode.style_id == 7
    assert mode.cell_percentage == pytest.approx(1.0)
    assert mode.blinkoff is None


def test_option_set_known_and_unknown():
    events = parse_redraw_event(
        ["option_set", ["guifont", "Mono:h12"], ["linespace", 2], ["custom", [1]]]
    )
    assert events[0] == OptionSet(GuiOption("guifont", "Mono:h12"))
    assert events[1].gui_option.value == pytest.approx(2.0)
    assert events[2] == OptionSet(GuiOption("custom", [1]))


def test_option_set_wrong_type_raises():
    with pytest.raises(ParseError):
        parse_redraw_event(["option_set", ["emoji", "yes"]])


def test_default_colors():
    (event,) = parse_redraw_event(["default_colors_set", [0xFF0000, 0x00FF00, 0x0000FF, 0, 0]])
    assert isinstance(event, DefaultColorsSet)
    assert event.colors.foreground == unpack_color(0xFF0000)
    assert event.colors.background == unpack_color(0x00FF00)
    assert event.colors.special == unpack_color(0x0000FF)


def test_hl_attr_define():
    attributes = {"foreground": 0x123456, "bold": True, "undercurl": True}
    (event,) = parse_redraw_event(["hl_attr_define", [5, attributes, {}, []]])
    assert isinstance(event, HighlightAttributesDefine)
    assert event.id == 5
    assert event.style.bold is True
    assert event.style.italic is False
    assert event.style.underline is UnderlineStyle.UNDERCURL
    assert event.style.colors.foreground == unpack_color(0x123456)


def test_grid_line_cells():
    (event,) = parse_redraw_event(["grid_line", [1, 2, 3, [["a", 4], ["b"], [" ", 0, 5]]]])
    assert event == GridLine(
        1, 2, 3, [GridLineCell("a", 4), GridLineCell("b"), GridLineCell(" ", 0, 5)]
    )


def test_grid_line_empty_cell_raises():
    with pytest.raises(ParseError):
        parse_redraw_event(["grid_line", [1, 2, 3, [[]]]])


def test_clear_destroy_close():
    assert parse_redraw_event(["grid_clear", [3]]) == [Clear(3)]
    assert parse_redraw_event(["grid_destroy", [3]]) == [Destroy(3)]
    assert parse_redraw_event(["win_close", [3]]) == [WindowClose(3)]


def test_cursor_goto_negative_is_clamped():
    events = parse_redraw_event(["grid_cursor_goto", [1, 4, 9], [1, -1, -5]])
    assert events == [CursorGoto(1, 4, 9), CursorGoto(1, 0, 0)]


def test_grid_scroll_signed_rows():
    (event,) = parse_redraw_event(["grid_scroll", [1, 0, 10, 0, 80, -2, 0]])
    assert event == Scroll(1, 0, 10, 0, 80, -2, 0)


def test_win_pos_skips_window_handle():
    (event,) = parse_redraw_event(["win_pos", [2, "win", 1, 0, 80, 20]])
    assert event == WindowPosition(2, 1, 0, 80, 20)


def test_win_float_pos():
    (event,) = parse_redraw_event(["win_float_pos", [4, "win", "SE", 1, 2.5, 3, True, 50]])
    assert event == WindowFloatPosition(4, WindowAnchor.SOUTH_EAST, 1, 2.5, 3.0, True, 50)


def test_win_float_pos_bad_anchor():
    with pytest.raises(ParseError) as info:
        parse_redraw_event(["win_float_pos", [4, "win", "XX", 1, 2.5, 3, True, 50]])
    assert "win_float_pos" in str(info.value)


def test_win_viewport_optional_values():
    events = parse_redraw_event(
        ["win_viewport", [2, "w", 0, 20, 5, 3], [2, "w", 0, 20, 5, 3, 100, -1]]
    )
    assert events[0] == WindowViewport(2, 0.0, 20.0, 5.0, 3.0, None, None)
    assert events[1].line_count == 100.0
    assert events[1].scroll_delta == -1.0


def test_win_viewport_margins():
    (event,) = parse_redraw_event(["win_viewport_margins", [2, "w", 1, 2, 3, 4]])
    assert event == WindowViewportMargins(2, 1, 2, 3, 4)


def test_msg_set_pos():
    (event,) = parse_redraw_event(["msg_set_pos", [1, 20, False, "-"]])
    assert event == MessageSetPosition(1, 20, False, "-")


def test_cmdline_events():
    content = [[0, ":"], [1, "echo"]]
    (show,) = parse_redraw_event(["cmdline_show", [content, 5, ":", "", 0, 1]])
    assert show == CommandLineShow([(0, ":"), (1, "echo")], 5, ":", "", 0, 1)
    assert parse_redraw_event(["cmdline_pos", [3, 1]]) == [CommandLinePosition(3, 1)]
    (block,) = parse_redraw_event(["cmdline_block_show", [[content]]])
    assert block == CommandLineBlockShow([[(0, ":"), (1, "echo")]])


def test_msg_show_and_history():
    (show,) = parse_redraw_event(["msg_show", ["emsg", [[2, "bad"]], True]])
    assert show == MessageShow(MessageKind.ERROR, [(2, "bad")], True)
    (history,) = parse_redraw_event(
        ["msg_history_show", [[["echo", [[0, "hi"]]], ["weird", []]]]]
    )
    assert history == MessageHistoryShow(
        [(MessageKind.ECHO, [(0, "hi")]), (MessageKind.UNKNOWN, [])]
    )


def test_missing_arguments_raise_with_event_name():
    with pytest.raises(ParseError) as info:
        parse_redraw_event(["grid_resize", [1, 80]])
    assert info.value.kind == "event"
    assert "grid_resize" in str(info.value)


def test_non_array_batch_raises():
    with pytest.raises(ParseError) as info:
        parse_redraw_event(["flush", "nope"])
    assert info.value.kind == "array"


def test_empty_event_raises():
    with pytest.raises(ParseError) as info:
        parse_redraw_event([])
    assert info.value.kind == "event"


def test_non_string_name_raises():
    with pytest.raises(ParseError) as info:
        parse_redraw_event([5, []])
    assert info.value.kind == "string"


def test_non_array_event_raises():
    with pytest.raises(ParseError) as info:
        parse_redraw_event("flush")
    assert info.value.kind == "array"