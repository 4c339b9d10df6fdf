import pytest

from managed_scripts.context import ExecutionContext
from managed_scripts.interpreters import Variant
from managed_scripts.templates import ScopedTemplateStore, Template


@pytest.fixture
def store():
    s = ScopedTemplateStore()
    s.add(Template(id="t1", name="Say hi", body="echo hi", variant=Variant.BATCH))
    s.add(Template(id="t2", name="Fail", body="exit 1", args=("flag",), variant=Variant.POWERSHELL))
    s.add(Template(id="empty", name="Empty", body="", variant=Variant.BATCH))
    return s


@pytest.fixture
def ctx(tmp_path):
    return ExecutionContext(run_id="run1", job="team/app", workspace=tmp_path, temp_dir=tmp_path / "tmp")
