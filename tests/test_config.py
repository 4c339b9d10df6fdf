import pytest

from managed_scripts.config import load_template_store
from managed_scripts.context import ExecutionContext
from managed_scripts.interpreters import Variant


def _write(tmp_path, text):
    p = tmp_path / "templates.yaml"
    p.write_text(text, encoding="utf-8")
    return p


def test_load_inline_and_file_bodies(tmp_path):
    (tmp_path / "deploy.ps1").write_bytes(b"param($env)\r\nWrite-Host $env")
    p = _write(
        tmp_path,
        """
templates:
  - id: hello
    name: Hello
    variant: batch
    body: echo hello
  - id: deploy
    name: Deploy
    variant: powershell
    scope: team
    body_file: deploy.ps1
    args: [env]
""",
    )
    store = load_template_store(p)
    team = ExecutionContext(run_id="r", job="team/app")

    deploy = store.lookup(team, "deploy")
    assert deploy.variant is Variant.POWERSHELL
    assert deploy.body == "param($env)\r\nWrite-Host $env"
    assert deploy.args == ("env",)
    assert store.lookup(ExecutionContext(run_id="r"), "deploy") is None
    assert [t.id for t in store.list_in_context(team)] == ["deploy", "hello"]


def test_name_defaults_to_id(tmp_path):
    p = _write(tmp_path, "templates:\n  - id: a\n    variant: batch\n    body: ''\n")
    t = load_template_store(p).lookup(ExecutionContext(run_id="r"), "a")
    assert t.name == "a"
    assert t.body == ""


@pytest.mark.parametrize(
    "text",
    [
        "{}",
        "templates:\n  - id: a\n    variant: bash\n    body: x\n",
        "templates:\n  - id: a\n    variant: batch\n",
        "templates:\n  - id: a\n    variant: batch\n    body: x\n    body_file: y\n",
    ],
)
def test_invalid_schema(tmp_path, text):
    with pytest.raises(ValueError, match="Invalid templates file schema"):
        load_template_store(_write(tmp_path, text))


def test_duplicate_ids(tmp_path):
    p = _write(
        tmp_path,
        "templates:\n"
        "  - {id: a, variant: batch, body: x}\n"
        "  - {id: a, variant: batch, body: y, scope: team}\n"
        "  - {id: a, variant: batch, body: z}\n",
    )
    with pytest.raises(ValueError, match="Duplicate template id 'a' in global scope"):
        load_template_store(p)


def test_missing_body_file(tmp_path):
    p = _write(tmp_path, "templates:\n  - {id: a, variant: batch, body_file: nope.bat}\n")
    with pytest.raises(ValueError, match="Cannot read body_file"):
        load_template_store(p)
