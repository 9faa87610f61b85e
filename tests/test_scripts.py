import argparse
import importlib.util
import sys
from pathlib import Path

import pytest

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))


def _load_run_evaluation():
    path = _project_root / "scripts" / "run_evaluation.py"
    module_spec = importlib.util.spec_from_file_location("run_evaluation", path)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


@pytest.mark.parametrize("text,expected", [("1234", 0x1234), ("0", 0), ("ffff", 0xFFFF)])
def test_hex_key_accepts(text, expected):
    assert _load_run_evaluation()._hex_key(text) == expected


@pytest.mark.parametrize("text", ["10000", "-1", "xyz"])
def test_hex_key_rejects(text):
    with pytest.raises(argparse.ArgumentTypeError):
        _load_run_evaluation()._hex_key(text)


def test_out_of_range_key_is_a_usage_error(monkeypatch, capsys):
    module = _load_run_evaluation()
    monkeypatch.setattr(sys, "argv", ["run_evaluation.py", "--tables-only", "--key", "10000"])
    with pytest.raises(SystemExit) as excinfo:
        module.main()
    assert excinfo.value.code == 2
    assert "key must be between 0000 and FFFF" in capsys.readouterr().err
