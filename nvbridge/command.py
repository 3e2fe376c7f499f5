"""Locating the Neovim binary and building the command that embeds it."""

from __future__ import annotations

import logging
import os
import re
import shlex
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Any

from nvbridge.cmd_line import CmdLineSettings

log = logging.getLogger(__name__)

_BOGUS_SCREEN_SIZE = re.compile(r"your \d+x\d+ screen size is bogus. expect trouble")
_CREATE_NO_WINDOW = 0x08000000


class NvimNotFoundError(RuntimeError):
    """Raised when no usable Neovim binary can be found or it misbehaves."""


def _is_windows() -> bool:
    return sys.platform == "win32"


def _is_macos() -> bool:
    return sys.platform == "darwin"


def _run_kwargs() -> dict[str, Any]:
    if _is_windows():
        return {"creationflags": getattr(subprocess, "CREATE_NO_WINDOW", _CREATE_NO_WINDOW)}
    return {}


@dataclass(frozen=True)
class NvimCommand:
    """A program and its arguments, ready to be started with piped stdio."""

    program: str
    args: list[str] = field(default_factory=list)
    stderr_piped: bool = True

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def spawn(self) -> subprocess.Popen:
        """Start the process with stdin and stdout connected to pipes."""
        return subprocess.Popen(
            self.argv,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE if self.stderr_piped else None,
            **_run_kwargs(),
        )


def _build_login_cmd_args(command: str, args: list[str]) -> tuple[str, list[str]]:
    """Wrap a command so that it runs in a login shell on macOS."""
    # A set $TERM means we were started from a terminal whose environment is fine.
    if "TERM" in os.environ:
        return command, list(args)

    user = os.environ.get("USER")
    if user is None:
        raise RuntimeError("USER environment variable not found")
    shell = os.environ.get("SHELL", "/bin/zsh")
    shell_name = shell.split("/")[-1] or "zsh"
    joined = shlex.join(args)
    exec_line = f"exec -a -{shell_name} {shell} -c '{command} {joined}'"
    # -f: no password, -l: keep directory, -p: keep environment, -q: quiet login.
    return "/usr/bin/login", ["-flpq", user, "/bin/zsh", "-fc", exec_line]


def create_platform_shell_command(
    command: str, args: list[str], settings: CmdLineSettings
) -> list[str]:
    """The argv that runs ``command`` through a shell where the platform needs one."""
    if _is_macos():
        program, program_args = _build_login_cmd_args(command, list(args))
        return [program, *program_args]
    if _is_windows() and settings.wsl:
        return ["wsl", "$SHELL", "-lc", f"{command} {' '.join(args)}"]
    return [command, *args]


def create_error_message(bin: str, stdout: str, stderr: list[str], is_wsl: bool) -> str:
    message = (
        "ERROR: Unexpected output from neovim binary:\n"
        f"\t{bin} -v\n"
        f"stdout: {stdout}\n"
        f"stderr: {chr(10).join(stderr)}\n"
        "\t"
    )
    if is_wsl:
        message += "\n\nPlease check your WSL configuration.\n"
    else:
        message += "\n\nPlease check your shell configuration.\n"
    return message


def neovim_ok(bin: str, args: list[str], settings: CmdLineSettings) -> bool:
    """Check that ``bin -v`` runs and reports a Neovim version.

    Returns False when the program cannot be started at all and raises
    NvimNotFoundError when it runs but its output is unexpected.
    """
    is_wsl = settings.wsl
    argv = create_platform_shell_command(bin, [*args, "-v"], settings)
    try:
        output = subprocess.run(argv, capture_output=True, **_run_kwargs())
    except OSError:
        return False

    stdout = output.stdout.decode("utf-8", errors="replace")
    stderr = output.stderr.decode("utf-8", errors="replace")
    unexpected_lines = [
        line for line in stderr.splitlines() if not _BOGUS_SCREEN_SIZE.search(line)
    ]

    if output.returncode != 0 or not stdout.startswith("NVIM v") or unexpected_lines:
        message = create_error_message(bin, stdout, unexpected_lines, is_wsl)
        if is_wsl:
            command = f"wsl --shell-type login -- {bin} -v"
        else:
            command = f"$SHELL -lc '{bin} -v'"
        raise NvimNotFoundError(f"{message}{command}")
    return True


def lex_nvim_cmdline(
    cmdline: str, settings: CmdLineSettings
) -> tuple[str, list[str]] | None:
    """Split a user-supplied Neovim command line into binary and arguments.

    Returns None when it cannot be split or the binary cannot be found.
    """
    if _is_windows() and not settings.wsl:
        # Windows paths do not survive shell-style splitting.
        bin, args = cmdline, []
    else:
        try:
            tokens = shlex.split(cmdline)
        except ValueError:
            return None
        if not tokens:
            return None
        bin, args = tokens[0], tokens[1:]

    if "/" not in bin and "\\" not in bin:
        found = platform_which(bin, settings)
        if found is None:
            return None
        bin = found

    return (bin, args) if neovim_ok(bin, args, settings) else None


def platform_which(bin: str, settings: CmdLineSettings) -> str | None:
    """Find ``bin`` on the PATH, falling back to the shell's ``which``."""
    if not settings.wsl:
        path = shutil.which(bin)
        if path is not None:
            return path

    argv = create_platform_shell_command("which", [bin], settings)
    log.debug("Running which command: %r", argv)
    try:
        output = subprocess.run(argv, capture_output=True, **_run_kwargs())
    except OSError:
        return None
    if output.returncode == 0:
        return output.stdout.decode("utf-8", errors="replace").strip()
    return None


def build_nvim_cmd_with_args(
    bin: str, args: list[str], settings: CmdLineSettings
) -> NvimCommand:
    """The command that starts ``bin`` embedded, with the configured arguments."""
    full_args = [*args, "--embed", *settings.neovim_args]
    if _is_macos():
        program, program_args = _build_login_cmd_args(bin, full_args)
        return NvimCommand(program, program_args)
    if _is_windows() and settings.wsl:
        return NvimCommand("wsl", ["--shell-type", "login", "--", bin, *full_args])
    return NvimCommand(bin, full_args)


def build_nvim_cmd(settings: CmdLineSettings) -> NvimCommand:
    if settings.neovim_bin is not None:
        lexed = lex_nvim_cmdline(settings.neovim_bin, settings)
        if lexed is not None:
            bin, args = lexed
            return build_nvim_cmd_with_args(bin, args, settings)
        raise NvimNotFoundError(f"ERROR: NEOVIM_BIN='{settings.neovim_bin}' was not found.")

    path = platform_which("nvim", settings)
    if path is not None and neovim_ok(path, [], settings):
        return build_nvim_cmd_with_args(path, [], settings)
    raise NvimNotFoundError("ERROR: nvim not found!")


def create_nvim_command(settings: CmdLineSettings) -> NvimCommand:
    """Find Neovim and return the command that embeds it, with stderr piped."""
    command = build_nvim_cmd(settings)
    log.debug("Starting neovim with: %r", command.argv)
    return command