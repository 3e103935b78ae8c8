import importlib
import tomllib
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _project():
    with (ROOT / "pyproject.toml").open("rb") as handle:
        return tomllib.load(handle)["project"]


def test_readme_is_the_project_readme():
    readme = _project()["readme"]

    assert readme == "README.md"
    assert (ROOT / readme).is_file()


def test_console_scripts_resolve():
    for target in _project()["scripts"].values():
        module_name, _, attribute = target.partition(":")
        assert callable(getattr(importlib.import_module(module_name), attribute))
