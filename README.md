# nvbridge

Pieces needed to write a graphical front end for Neovim. Each module can be
used on its own, and none of them needs a third-party library.

## Modules

- `nvbridge.redraw` turns one batch of a `redraw` notification
  (`[name, args1, args2, ...]`) into typed event objects with
  `parse_redraw_event`. Every event is a `RedrawEvent` subclass: `SetTitle`,
  `ModeInfoSet`, `OptionSet`, `ModeChange`, `Resize`, `DefaultColorsSet`,
  `HighlightAttributesDefine`, `GridLine`, `Clear`, `Destroy`, `CursorGoto`,
  `Scroll`, `WindowPosition`, `WindowFloatPosition`,
  `WindowExternalPosition`, `WindowHide`, `WindowClose`,
  `MessageSetPosition`, `WindowViewport`, `WindowViewportMargins`,
  `CommandLineShow`, `CommandLinePosition`, `CommandLineSpecialCharacter`,
  `CommandLineBlockShow`, `CommandLineBlockAppend`, `MessageShow`,
  `MessageShowMode`, `MessageShowCommand`, `MessageRuler` and
  `MessageHistoryShow`. Events without arguments (`flush`, `mouse_on`,
  `mouse_off`, `busy_start`, `busy_stop`, `cmdline_hide`,
  `cmdline_block_hide`, `msg_clear`, `suspend`) become a `SimpleEvent` whose
  `kind` is the event name. `set_icon` and unknown event names are skipped.
  Negative cursor rows and columns in `grid_cursor_goto` are clamped to 0.
  A malformed argument list raises `nvbridge.events.ParseError` naming the
  event.
- `nvbridge.events` holds the shared value types and parsing helpers:
  `Color`, `Colors`, `Style`, `UnderlineStyle`, `CursorMode`,
  `GridLineCell`, `MessageKind` (with `MessageKind.parse`), `GuiOption`,
  `WindowAnchor`, `EditorMode`, `unpack_color`, `parse_style`,
  `parse_styled_content`, `extract_values` and the primitive parsers
  `parse_array`, `parse_map`, `parse_string`, `parse_u64`, `parse_i64`,
  `parse_f64`, `parse_bool` and `parse_window_anchor`. Maps may be given
  either as dicts or as lists of key/value pairs.
- `nvbridge.api_info` parses the `[channel, metadata]` reply of
  `nvim_get_api_info` with `parse_api_info` into an `ApiInformation`
  holding an `ApiVersion`, a set of `ApiFunction`, the UI options and a set
  of `ApiEvent`. `ApiVersion.has_version(major, minor, patch)` and
  `ApiInformation.has_event(name)` answer the usual feature checks. Missing
  or unexpected fields raise `ApiInfoParseError`.
- `nvbridge.dimensions` provides `Dimensions`, parsed from and printed as
  `<width>x<height>`, with `from_tuple`, `as_tuple`, element-wise `*` and
  `//`.
- `nvbridge.cmd_line` parses GUI command-line arguments into a frozen
  `CmdLineSettings`. `parse_command_line(args, environ)` reads the command
  line and falls back to environment variables (`NEOVIDE_FRAME`,
  `NEOVIDE_SRGB`, `NEOVIDE_VSYNC`, `NEOVIM_BIN`, ...) and then to defaults.
  `handle_command_line_arguments(args, environ)` also applies the `--no-*`
  switches and builds `neovim_args`: `-p` when tabs are on, then the files
  to open, then everything after `--`. With `--wsl`, Windows drive paths are
  rewritten to quoted `/mnt/<drive>/...` paths. Invalid arguments raise
  `ValueError`.
- `nvbridge.command` locates an `nvim` binary (from `neovim_bin` or the
  `PATH`), checks that `nvim -v` reports a Neovim version, and returns an
  `NvimCommand` that runs it with `--embed`; `NvimCommand.spawn()` starts it
  with piped stdin and stdout. Failures raise `NvimNotFoundError`.
- `nvbridge.clipboard` answers Neovim's clipboard provider requests with
  `get_clipboard_contents` and `set_clipboard_contents`, over a `Clipboard`
  made of any providers with `get_contents`/`set_contents` methods
  (`MemoryClipboard` by default; the `*` register uses the selection
  provider when one is given).
- `nvbridge.channel_utils` provides `LoggingSender`, which logs each
  message and puts it on any queue with `put_nowait`.

## Examples

Parsing a redraw batch:

```python
from nvbridge.redraw import parse_redraw_event

events = parse_redraw_event(["grid_cursor_goto", [1, 4, 7]])
cursor = events[0]
print(cursor.grid, cursor.row, cursor.column)  # 1 4 7
```

Window and grid sizes:

```python
from nvbridge.dimensions import Dimensions

size = Dimensions.parse("120x40")
print(size, size.as_tuple())  # 120x40 (120, 40)
```

Command-line handling, with the environment passed in explicitly:

```python
from nvbridge.cmd_line import handle_command_line_arguments

settings = handle_command_line_arguments(
    ["neovide", "./notes.md", "--grid=80x24"], environ={}
)
print(settings.neovim_args)    # ['-p', './notes.md']
print(settings.geometry.grid)  # 80x24
```

Clipboard requests:

```python
from nvbridge.clipboard import Clipboard, MemoryClipboard, get_clipboard_contents

clipboard = Clipboard(MemoryClipboard("one\ntwo\n"))
print(get_clipboard_contents(clipboard, "+"))  # [['one', 'two', ''], 'V']
```

Checking what the connected Neovim supports, given the reply of
`nvim_get_api_info` as plain Python values:

```python
from nvbridge.api_info import parse_api_info

info = parse_api_info(api_info_reply)
if info.version.has_version(0, 10, 0) and info.has_event("win_viewport"):
    ...
```

## What this package does not do

It has no command of its own and draws nothing. It does not speak
msgpack-rpc: connecting to Neovim, decoding its messages and sending UI
requests are left to the caller, who passes decoded values to the parsers.
It does not access the system clipboard; supply a provider object for that.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.