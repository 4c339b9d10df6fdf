from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from loguru import logger

from managed_scripts.binder import bind_args
from managed_scripts.errors import ConfigurationError, ContextUnavailableError
from managed_scripts.interpreters import Variant
from managed_scripts.step import BuildStep
from managed_scripts.util.events import EventLog


def _fake_run(returncode, seen):
    """subprocess.run stand-in that records argv and the script content at spawn time."""

    def _run(cmd, **kwargs):
        seen["argv"] = list(cmd)
        seen["kwargs"] = kwargs
        script = cmd[3] if cmd[0] == "cmd" else cmd[3][3:-1]
        seen["content"] = Path(script).read_bytes().decode("utf-8-sig")
        return MagicMock(returncode=returncode)

    return _run


def test_batch_scenario_succeeds(store, ctx):
    seen = {}
    step = BuildStep.create("t1", Variant.BATCH, [])
    with patch("subprocess.run", side_effect=_fake_run(0, seen)):
        status = step.execute(ctx, store)

    assert status.ok
    assert seen["content"] == "echo hi\r\nexit %ERRORLEVEL%"
    assert seen["argv"][:3] == ["cmd", "/c", "call"]
    assert seen["argv"][3].endswith(".bat")
    assert len(seen["argv"]) == 4
    assert seen["kwargs"]["shell"] is False
    assert seen["kwargs"]["cwd"] == str(ctx.workspace)


def test_powershell_scenario_fails(store, ctx):
    seen = {}
    step = BuildStep.create("t2", "powershell", ["--flag"])
    with patch("subprocess.run", side_effect=_fake_run(1, seen)):
        status = step.execute(ctx, store)

    assert not status.ok
    assert status.exit_code == 1
    assert seen["content"] == "exit 1\r\nexit $LastExitCode"
    argv = seen["argv"]
    assert argv[:3] == ["powershell.exe", "-ExecutionPolicy", "ByPass"]
    assert argv[3].startswith("& '") and argv[3].endswith(".ps1'")
    assert argv[4:] == ["--flag"]
    assert status.argv == tuple(argv)


def test_empty_body_batch(store, ctx):
    seen = {}
    with patch("subprocess.run", side_effect=_fake_run(0, seen)):
        status = BuildStep.create("empty", Variant.BATCH).execute(ctx, store)
    assert seen["content"] == "\r\nexit %ERRORLEVEL%"
    assert status.ok


def test_unknown_template_aborts_before_spawn(store, ctx):
    with patch("subprocess.run") as mock_run:
        with pytest.raises(ConfigurationError, match="'nope' does not exist"):
            BuildStep.create("nope", Variant.BATCH).execute(ctx, store)
    mock_run.assert_not_called()
    assert not ctx.temp_dir.exists() or list(ctx.temp_dir.iterdir()) == []


def test_step_variant_does_not_filter_lookup(store, ctx):
    # t2 is stored as a PowerShell template; a batch step still resolves it by id
    seen = {}
    with patch("subprocess.run", side_effect=_fake_run(0, seen)):
        status = BuildStep.create("t2", Variant.BATCH).execute(ctx, store)
    assert status.ok
    assert seen["argv"][:3] == ["cmd", "/c", "call"]
    assert seen["argv"][3].endswith(".bat")
    assert seen["content"] == "exit 1\r\nexit %ERRORLEVEL%"


@pytest.mark.parametrize("template_id", ["", "   "])
def test_blank_template_id(store, ctx, template_id):
    with pytest.raises(ConfigurationError, match="No managed script selected"):
        BuildStep.create(template_id, Variant.BATCH).execute(ctx, store)


def test_missing_context_skips_lookup():
    store = MagicMock()
    with patch("subprocess.run") as mock_run:
        with pytest.raises(ContextUnavailableError, match="can't get content of script: t1"):
            BuildStep.create("t1", Variant.BATCH).execute(None, store)
    store.lookup.assert_not_called()
    mock_run.assert_not_called()


def test_arg_count_mismatch_is_tolerated(store, ctx):
    seen = {}
    # t2 declares one argument
    step = BuildStep.create("t2", Variant.POWERSHELL, ["a", "b", "c"])
    with patch("subprocess.run", side_effect=_fake_run(0, seen)):
        step.execute(ctx, store)
    assert seen["argv"][4:] == ["a", "b", "c"]


def test_context_env_is_overlaid(store, tmp_path):
    from managed_scripts.context import ExecutionContext

    ctx = ExecutionContext(run_id="r", workspace=tmp_path, env={"BUILD_TAG": "b-1"}, temp_dir=tmp_path)
    seen = {}
    with patch("subprocess.run", side_effect=_fake_run(0, seen)):
        BuildStep.create("t1", Variant.BATCH).execute(ctx, store)
    assert seen["kwargs"]["env"]["BUILD_TAG"] == "b-1"
    assert "PATH" in seen["kwargs"]["env"]


def test_phase_events(store, ctx, tmp_path):
    log = EventLog(tmp_path / "events.jsonl", run_id="run1")
    with patch("subprocess.run", return_value=MagicMock(returncode=3)):
        BuildStep.create("t1", Variant.BATCH).execute(ctx, store, events=log)
    events = log.read()
    assert [e["phase"] for e in events] == ["resolving", "materializing", "spawned", "completed"]
    assert events[-1]["exit_code"] == 3
    assert all(e["run_id"] == "run1" for e in events)


def test_form_binding():
    step = BuildStep.from_form("t1", False, ["hidden"], "batch")
    assert step.args is None
    assert bind_args(step) == []

    step = BuildStep.from_form("t1", True, ["a", "b"], "batch")
    assert bind_args(step) == ["a", "b"]

    assert bind_args(BuildStep.from_form("t1", True, None, "batch")) == []
    assert bind_args(BuildStep.create("t1", "batch", None)) == []


def test_missing_context_logged_as_critical():
    levels = []
    sink = logger.add(lambda m: levels.append(m.record["level"].name), level="DEBUG")
    try:
        with pytest.raises(ContextUnavailableError):
            BuildStep.create("t1", Variant.BATCH).execute(None, MagicMock())
    finally:
        logger.remove(sink)
    assert "CRITICAL" in levels
