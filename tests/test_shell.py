import sys
from unittest.mock import MagicMock, patch

import pytest

from managed_scripts.util.shell import run_cmd


def test_run_cmd_list_mode(tmp_path):
    """A list argv is executed without a shell."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=0)

        cmd = ["cmd", "/c", "call", "x.bat", "arg"]
        res = run_cmd(cmd, tmp_path)

        args, kwargs = mock_run.call_args
        assert args[0] == cmd
        assert kwargs["shell"] is False
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["env"] is None
        assert res.returncode == 0


def test_run_cmd_env_overlay(tmp_path):
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=0)
        run_cmd(["x"], tmp_path, env={"FOO": "bar"})
        env = mock_run.call_args.kwargs["env"]
        assert env["FOO"] == "bar"


def test_run_cmd_spawn_failure(tmp_path):
    stderr = tmp_path / "err.log"
    res = run_cmd(["definitely-not-a-real-binary-xyz"], tmp_path, tmp_path / "out.log", stderr)
    assert res.returncode == 1
    assert "command execution failed" in stderr.read_text()


@pytest.mark.skipif(sys.platform == "win32", reason="posix shell")
def test_run_cmd_real_exit_codes(tmp_path):
    stdout = tmp_path / "out.log"
    assert run_cmd(["sh", "-c", "echo hello"], tmp_path, stdout, tmp_path / "err.log").returncode == 0
    assert "hello" in stdout.read_text()
    assert run_cmd(["sh", "-c", "exit 7"], tmp_path).returncode == 7
