import os
import subprocess
from unittest import mock

import pytest

from nvbridge.cmd_line import CmdLineSettings
from nvbridge.command import (
    NvimCommand,
    NvimNotFoundError,
    build_nvim_cmd,
    build_nvim_cmd_with_args,
    create_error_message,
    create_nvim_command,
    create_platform_shell_command,
    lex_nvim_cmdline,
    neovim_ok,
    platform_which,
)


def completed(returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=stderr)


GOOD = completed(stdout=b"NVIM v0.10.0\nBuild type: Release\n")


@pytest.fixture
def linux():
    with mock.patch("sys.platform", "linux"):
        yield


def test_error_message_shell():
    message = create_error_message("nvim", "out", ["a", "b"], False)
    assert message.startswith("ERROR: Unexpected output from neovim binary:\n\tnvim -v\n")
    assert "stdout: out\n" in message
    assert "stderr: a\nb\n" in message
    assert message.endswith("\n\nPlease check your shell configuration.\n")


def test_error_message_wsl():
    message = create_error_message("nvim", "", [], True)
    assert message.endswith("\n\nPlease check your WSL configuration.\n")


def test_shell_command_linux(linux):
    argv = create_platform_shell_command("which", ["nvim"], CmdLineSettings())
    assert argv == ["which", "nvim"]


def test_shell_command_windows_wsl():
    with mock.patch("sys.platform", "win32"):
        argv = create_platform_shell_command("which", ["nvim"], CmdLineSettings(wsl=True))
    assert argv == ["wsl", "$SHELL", "-lc", "which nvim"]


def test_shell_command_macos_with_term():
    with mock.patch("sys.platform", "darwin"), mock.patch.dict(
        os.environ, {"TERM": "xterm"}, clear=True
    ):
        argv = create_platform_shell_command("nvim", ["-v"], CmdLineSettings())
    assert argv == ["nvim", "-v"]


def test_shell_command_macos_login():
    env = {"USER": "someone", "SHELL": "/bin/bash"}
    with mock.patch("sys.platform", "darwin"), mock.patch.dict(os.environ, env, clear=True):
        argv = create_platform_shell_command("nvim", ["-v"], CmdLineSettings())
    assert argv[:5] == ["/usr/bin/login", "-flpq", "someone", "/bin/zsh", "-fc"]
    assert argv[5] == "exec -a -bash /bin/bash -c 'nvim -v'"


def test_shell_command_macos_without_user():
    with mock.patch("sys.platform", "darwin"), mock.patch.dict(os.environ, {}, clear=True):
        with pytest.raises(RuntimeError):
            create_platform_shell_command("nvim", [], CmdLineSettings())


def test_neovim_ok_success_appends_version_flag(linux):
    with mock.patch("subprocess.run", return_value=GOOD) as run:
        assert neovim_ok("nvim", ["--clean"], CmdLineSettings()) is True
    assert run.call_args.args[0] == ["nvim", "--clean", "-v"]


def test_neovim_ok_ignores_bogus_screen_size(linux):
    result = completed(
        stdout=b"NVIM v0.10.0\n",
        stderr=b"your 0x0 screen size is bogus. expect trouble\n",
    )
    with mock.patch("subprocess.run", return_value=result):
        assert neovim_ok("nvim", [], CmdLineSettings()) is True


def test_neovim_ok_unexpected_stderr_raises(linux):
    result = completed(stdout=b"NVIM v0.10.0\n", stderr=b"oops\n")
    with mock.patch("subprocess.run", return_value=result):
        with pytest.raises(NvimNotFoundError) as info:
            neovim_ok("nvim", [], CmdLineSettings())
    assert "stderr: oops" in str(info.value)
    assert str(info.value).endswith("$SHELL -lc 'nvim -v'")


def test_neovim_ok_failure_exit_code_raises(linux):
    with mock.patch("subprocess.run", return_value=completed(1, b"NVIM v0.10.0")):
        with pytest.raises(NvimNotFoundError):
            neovim_ok("nvim", [], CmdLineSettings())


def test_neovim_ok_wrong_stdout_under_wsl():
    with mock.patch("sys.platform", "win32"), mock.patch(
        "subprocess.run", return_value=completed(stdout=b"vim 9")
    ):
        with pytest.raises(NvimNotFoundError) as info:
            neovim_ok("nvim", [], CmdLineSettings(wsl=True))
    assert str(info.value).endswith("wsl --shell-type login -- nvim -v")


def test_neovim_ok_cannot_start(linux):
    with mock.patch("subprocess.run", side_effect=FileNotFoundError):
        assert neovim_ok("missing", [], CmdLineSettings()) is False


def test_platform_which_uses_path_lookup(linux):
    with mock.patch("shutil.which", return_value="/usr/bin/nvim"), mock.patch(
        "subprocess.run"
    ) as run:
        assert platform_which("nvim", CmdLineSettings()) == "/usr/bin/nvim"
    run.assert_not_called()


def test_platform_which_falls_back_to_shell(linux):
    with mock.patch("shutil.which", return_value=None), mock.patch(
        "subprocess.run", return_value=completed(stdout=b"/opt/nvim/bin/nvim\n")
    ) as run:
        assert platform_which("nvim", CmdLineSettings()) == "/opt/nvim/bin/nvim"
    assert run.call_args.args[0] == ["which", "nvim"]


def test_platform_which_wsl_skips_path_lookup():
    with mock.patch("sys.platform", "win32"), mock.patch("shutil.which") as which, mock.patch(
        "subprocess.run", return_value=completed(stdout=b"/usr/bin/nvim\n")
    ):
        assert platform_which("nvim", CmdLineSettings(wsl=True)) == "/usr/bin/nvim"
    which.assert_not_called()


def test_platform_which_not_found(linux):
    with mock.patch("shutil.which", return_value=None), mock.patch(
        "subprocess.run", return_value=completed(1)
    ):
        assert platform_which("nvim", CmdLineSettings()) is None


def test_lex_splits_path_with_arguments(linux):
    with mock.patch("subprocess.run", return_value=GOOD):
        result = lex_nvim_cmdline("/usr/bin/env nvim", CmdLineSettings())
    assert result == ("/usr/bin/env", ["nvim"])


def test_lex_resolves_bare_name(linux):
    with mock.patch("shutil.which", return_value="/usr/bin/nvim"), mock.patch(
        "subprocess.run", return_value=GOOD
    ):
        result = lex_nvim_cmdline("nvim --clean", CmdLineSettings())
    assert result == ("/usr/bin/nvim", ["--clean"])


@pytest.mark.parametrize("cmdline", ["", "   ", "'unterminated"])
def test_lex_invalid_cmdline(linux, cmdline):
    assert lex_nvim_cmdline(cmdline, CmdLineSettings()) is None


def test_lex_windows_keeps_cmdline_whole():
    with mock.patch("sys.platform", "win32"), mock.patch("subprocess.run", return_value=GOOD):
        result = lex_nvim_cmdline("C:\\Program Files\\nvim.exe", CmdLineSettings())
    assert result == ("C:\\Program Files\\nvim.exe", [])


def test_build_with_args_linux(linux):
    settings = CmdLineSettings(neovim_args=["-p", "foo.txt"])
    command = build_nvim_cmd_with_args("/usr/bin/nvim", ["--clean"], settings)
    assert command.argv == ["/usr/bin/nvim", "--clean", "--embed", "-p", "foo.txt"]


def test_build_with_args_wsl():
    with mock.patch("sys.platform", "win32"):
        command = build_nvim_cmd_with_args("nvim", [], CmdLineSettings(wsl=True))
    assert command.argv == ["wsl", "--shell-type", "login", "--", "nvim", "--embed"]


def test_build_nvim_cmd_bin_not_found(linux):
    with mock.patch("shutil.which", return_value=None), mock.patch(
        "subprocess.run", return_value=completed(1)
    ):
        with pytest.raises(NvimNotFoundError) as info:
            build_nvim_cmd(CmdLineSettings(neovim_bin="nvim"))
    assert str(info.value) == "ERROR: NEOVIM_BIN='nvim' was not found."


def test_build_nvim_cmd_nvim_missing(linux):
    with mock.patch("shutil.which", return_value=None), mock.patch(
        "subprocess.run", side_effect=FileNotFoundError
    ):
        with pytest.raises(NvimNotFoundError) as info:
            build_nvim_cmd(CmdLineSettings())
    assert str(info.value) == "ERROR: nvim not found!"


def test_create_nvim_command(linux):
    with mock.patch("shutil.which", return_value="/usr/bin/nvim"), mock.patch(
        "subprocess.run", return_value=GOOD
    ):
        command = create_nvim_command(CmdLineSettings())
    assert command == NvimCommand("/usr/bin/nvim", ["--embed"], stderr_piped=True)