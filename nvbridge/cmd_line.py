"""Command line parsing for the GUI front end."""

from __future__ import annotations

import argparse
import dataclasses
import enum
import os
import re
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, NoReturn

from nvbridge.dimensions import Dimensions

SRGB_DEFAULT = sys.platform == "win32"
_HAS_OPENGL_FLAG = sys.platform in ("win32", "darwin")

_FALSEY = {"", "n", "no", "f", "false", "off", "0"}
_WINDOWS_DRIVE_PATH = re.compile(r"([A-Za-z]):[\\/]?(.*)", re.DOTALL)


class Frame(enum.Enum):
    """Which window decorations to use."""

    FULL = "full"
    NONE = "none"


class MouseCursorIcon(enum.Enum):
    ARROW = "arrow"
    IBEAM = "i-beam"

    def cursor_icon(self) -> str:
        """The name of the system cursor icon this option selects."""
        return "text" if self is MouseCursorIcon.IBEAM else "default"


@dataclass(frozen=True)
class GeometryArgs:
    """Initial window geometry; at most one of these is given.

    ``grid_requested`` is set when ``--grid`` was passed, with or without a
    value; ``grid`` then holds the value, if any.
    """

    grid_requested: bool = False
    grid: Dimensions | None = None
    size: Dimensions | None = None
    maximized: bool = False


@dataclass(frozen=True)
class CmdLineSettings:
    files_to_open: list[str] = field(default_factory=list)
    neovim_args: list[str] = field(default_factory=list)
    log_to_file: bool = False
    server: str | None = None
    wsl: bool = False
    frame: Frame = Frame.FULL
    no_multi_grid: bool = False
    mouse_cursor_icon: MouseCursorIcon = MouseCursorIcon.ARROW
    title_hidden: bool = False
    fork: bool = False
    _no_fork: bool = field(default=False, repr=False)
    idle: bool = True
    tabs: bool = True
    _no_tabs: bool = field(default=False, repr=False)
    srgb: bool = SRGB_DEFAULT
    _no_srgb: bool = field(default=False, repr=False)
    vsync: bool = True
    _no_vsync: bool = field(default=False, repr=False)
    neovim_bin: str | None = None
    wayland_app_id: str = "neovide"
    x11_wm_class: str = "neovide"
    x11_wm_class_instance: str = "neovide"
    geometry: GeometryArgs = field(default_factory=GeometryArgs)
    opengl: bool = False


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise ValueError(message)


def _enum_value(enum_cls: type[enum.Enum], text: str) -> Any:
    try:
        return enum_cls(text)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ValueError(
            f"invalid value '{text}' (possible values: {choices})"
        ) from None


def _frame(text: str) -> Frame:
    return _enum_value(Frame, text)


def _cursor_icon(text: str) -> MouseCursorIcon:
    return _enum_value(MouseCursorIcon, text)


def _dimensions(text: str) -> Dimensions:
    try:
        return Dimensions.parse(text)
    except ValueError as error:
        raise argparse.ArgumentTypeError(str(error)) from None


def _is_truthy(text: str) -> bool:
    return text.strip().lower() not in _FALSEY


_GRID_WITHOUT_VALUE = object()


def _build_parser() -> _Parser:
    parser = _Parser(
        prog="neovide",
        description="No Nonsense Neovim Gui",
        allow_abbrev=False,
    )
    parser.add_argument("files_to_open", nargs="*", default=[])
    parser.add_argument("--log", dest="log_to_file", action="store_true")
    parser.add_argument("--server", "--remote-tcp", dest="server", metavar="ADDRESS")
    parser.add_argument("--wsl", action="store_const", const=True)
    parser.add_argument("--frame", type=_frame)
    parser.add_argument("--no-multigrid", dest="no_multi_grid", action="store_const", const=True)
    parser.add_argument("--mouse-cursor-icon", dest="mouse_cursor_icon", type=_cursor_icon)
    parser.add_argument("--title-hidden", dest="title_hidden", action="store_const", const=True)
    parser.add_argument("--fork", action="store_const", const=True)
    parser.add_argument("--no-fork", dest="no_fork", action="store_true")
    parser.add_argument("--no-idle", dest="idle", action="store_const", const=False)
    parser.add_argument("--tabs", action="store_const", const=True)
    parser.add_argument("--no-tabs", dest="no_tabs", action="store_true")
    parser.add_argument("--srgb", action="store_const", const=True)
    parser.add_argument("--no-srgb", dest="no_srgb", action="store_true")
    parser.add_argument("--vsync", action="store_const", const=True)
    parser.add_argument("--no-vsync", dest="no_vsync", action="store_true")
    parser.add_argument("--neovim-bin", dest="neovim_bin")
    parser.add_argument("--wayland_app_id", dest="wayland_app_id")
    parser.add_argument("--x11-wm-class", dest="x11_wm_class")
    parser.add_argument("--x11-wm-class-instance", dest="x11_wm_class_instance")
    geometry = parser.add_mutually_exclusive_group()
    geometry.add_argument("--grid", nargs="?", type=_dimensions, const=_GRID_WITHOUT_VALUE)
    geometry.add_argument("--size", type=_dimensions)
    geometry.add_argument("--maximized", action="store_const", const=True)
    if _HAS_OPENGL_FLAG:
        parser.add_argument("--opengl", action="store_const", const=True)
    return parser


def _resolve(
    cli_value: Any,
    environ: Mapping[str, str],
    env_name: str | None,
    default: Any,
    convert: Any = _is_truthy,
) -> Any:
    """Pick the command line value, then the environment, then the default."""
    if cli_value is not None:
        return cli_value
    if env_name is not None and env_name in environ:
        return convert(environ[env_name])
    return default


def parse_command_line(
    args: Sequence[str], environ: Mapping[str, str] | None = None
) -> CmdLineSettings:
    """Parse ``args`` (program name first) into settings.

    Options not given on the command line fall back to their environment
    variables in ``environ`` and then to their defaults. Raises ValueError on
    invalid arguments.
    """
    if environ is None:
        environ = os.environ
    arguments = list(args)[1:]
    if "--" in arguments:
        split_at = arguments.index("--")
        arguments, passthrough = arguments[:split_at], arguments[split_at + 1 :]
    else:
        passthrough = []

    parsed = _build_parser().parse_intermixed_args(arguments)

    if parsed.grid is _GRID_WITHOUT_VALUE:
        geometry = GeometryArgs(grid_requested=True)
    else:
        geometry = GeometryArgs(
            grid_requested=parsed.grid is not None,
            grid=parsed.grid,
            size=parsed.size,
            maximized=_resolve(parsed.maximized, environ, "NEOVIDE_MAXIMIZED", False),
        )
    if parsed.grid is _GRID_WITHOUT_VALUE:
        geometry = dataclasses.replace(
            geometry,
            maximized=_resolve(parsed.maximized, environ, "NEOVIDE_MAXIMIZED", False),
        )

    identity = str
    return CmdLineSettings(
        files_to_open=list(parsed.files_to_open),
        neovim_args=passthrough,
        log_to_file=parsed.log_to_file,
        server=parsed.server,
        wsl=_resolve(parsed.wsl, environ, "NEOVIDE_WSL", False),
        frame=_resolve(parsed.frame, environ, "NEOVIDE_FRAME", Frame.FULL, _frame),
        no_multi_grid=_resolve(parsed.no_multi_grid, environ, "NEOVIDE_NO_MULTIGRID", False),
        mouse_cursor_icon=_resolve(
            parsed.mouse_cursor_icon,
            environ,
            "NEOVIDE_MOUSE_CURSOR_ICON",
            MouseCursorIcon.ARROW,
            _cursor_icon,
        ),
        title_hidden=_resolve(parsed.title_hidden, environ, "NEOVIDE_TITLE_HIDDEN", False),
        fork=_resolve(parsed.fork, environ, "NEOVIDE_FORK", False),
        _no_fork=parsed.no_fork,
        idle=_resolve(parsed.idle, environ, "NEOVIDE_IDLE", True),
        tabs=_resolve(parsed.tabs, environ, "NEOVIDE_TABS", True),
        _no_tabs=parsed.no_tabs,
        srgb=_resolve(parsed.srgb, environ, "NEOVIDE_SRGB", SRGB_DEFAULT),
        _no_srgb=parsed.no_srgb,
        vsync=_resolve(parsed.vsync, environ, "NEOVIDE_VSYNC", True),
        _no_vsync=parsed.no_vsync,
        neovim_bin=_resolve(parsed.neovim_bin, environ, "NEOVIM_BIN", None, identity),
        wayland_app_id=_resolve(
            parsed.wayland_app_id, environ, "NEOVIDE_APP_ID", "neovide", identity
        ),
        x11_wm_class=_resolve(
            parsed.x11_wm_class, environ, "NEOVIDE_WM_CLASS", "neovide", identity
        ),
        x11_wm_class_instance=_resolve(
            parsed.x11_wm_class_instance,
            environ,
            "NEOVIDE_WM_CLASS_INSTANCE",
            "neovide",
            identity,
        ),
        geometry=geometry,
        opengl=_resolve(getattr(parsed, "opengl", None), environ, "NEOVIDE_OPENGL", False)
        if _HAS_OPENGL_FLAG
        else False,
    )


def _quote(path: str) -> str:
    return "'" + path.replace("'", "'\\''") + "'"


def _wsl_paths(paths: list[str], wsl: bool, escape: bool) -> list[str]:
    """Translate host paths into WSL paths when running Neovim in WSL."""
    if not wsl:
        return paths
    converted = []
    for path in paths:
        match = _WINDOWS_DRIVE_PATH.fullmatch(path)
        if match:
            drive, rest = match.groups()
            rest = rest.replace("\\", "/")
            path = f"/mnt/{drive.lower()}/{rest}" if rest else f"/mnt/{drive.lower()}"
        converted.append(_quote(path) if escape else path)
    return converted


def handle_command_line_arguments(
    args: Sequence[str], environ: Mapping[str, str] | None = None
) -> CmdLineSettings:
    """Parse ``args`` and build the final settings, including Neovim's arguments.

    The ``--no-*`` switches take precedence over their positive counterparts.
    Files to open are placed before the pass-through arguments, preceded by
    ``-p`` when tabs are enabled.
    """
    settings = parse_command_line(args, environ)
    tabs = settings.tabs and not settings._no_tabs
    neovim_args = (
        (["-p"] if tabs else [])
        + _wsl_paths(list(settings.files_to_open), settings.wsl, True)
        + list(settings.neovim_args)
    )
    return dataclasses.replace(
        settings,
        tabs=tabs,
        fork=settings.fork and not settings._no_fork,
        srgb=settings.srgb and not settings._no_srgb,
        vsync=settings.vsync and not settings._no_vsync,
        files_to_open=[],
        neovim_args=neovim_args,
    )