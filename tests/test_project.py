import json
import subprocess
from pathlib import Path

import pytest

from rustdrills.project import Crate, RustAnalyzerProject


def test_add_path_accepts_rust_files():
    project = RustAnalyzerProject()
    project.add_path(Path("exercises/intro/intro1.rs"))
    assert len(project.crates) == 1
    crate = project.crates[0]
    assert crate.root_module == str(Path("exercises/intro/intro1.rs"))
    assert crate.edition == "2021"
    assert crate.cfg == ["test"]
    assert crate.deps == []


@pytest.mark.parametrize("name", ["README.md", "Cargo.toml", "intro", "build.rs.bak"])
def test_add_path_ignores_other_files(name):
    project = RustAnalyzerProject()
    project.add_path(Path("exercises") / name)
    assert project.crates == []


def test_crate_to_dict_keys():
    crate = Crate(root_module="a.rs")
    assert crate.to_dict() == {
        "root_module": "a.rs",
        "edition": "2021",
        "deps": [],
        "cfg": ["test"],
    }


def test_exercises_to_json_collects_rust_files(tmp_path):
    (tmp_path / "intro").mkdir()
    (tmp_path / "if").mkdir()
    (tmp_path / "intro" / "intro1.rs").write_text("fn main() {}\n")
    (tmp_path / "intro" / "intro2.rs").write_text("fn main() {}\n")
    (tmp_path / "if" / "if1.rs").write_text("fn main() {}\n")
    (tmp_path / "intro" / "README.md").write_text("notes\n")

    project = RustAnalyzerProject()
    project.exercises_to_json(tmp_path)
    modules = [crate.root_module for crate in project.crates]
    assert len(modules) == 3
    assert modules == sorted(modules)
    assert all(module.endswith(".rs") for module in modules)
    assert str(tmp_path / "if" / "if1.rs") in modules


def test_exercises_to_json_empty_directory(tmp_path):
    project = RustAnalyzerProject()
    project.exercises_to_json(tmp_path)
    assert project.crates == []


def test_write_to_disk_round_trip(tmp_path):
    project = RustAnalyzerProject(sysroot_src="/sysroot")
    project.add_path("exercises/if/if1.rs")
    target = tmp_path / "rust-project.json"
    project.write_to_disk(target)
    text = target.read_text(encoding="utf-8")
    assert json.loads(text) == project.to_dict()
    assert " " not in text.replace(str(Path("exercises/if/if1.rs")), "")


def test_get_sysroot_src_from_environment(monkeypatch):
    monkeypatch.setenv("RUST_SRC_PATH", "/custom/library")
    project = RustAnalyzerProject()
    project.get_sysroot_src()
    assert project.sysroot_src == "/custom/library"


def test_get_sysroot_src_from_rustc(monkeypatch, capsys):
    monkeypatch.delenv("RUST_SRC_PATH", raising=False)
    calls = []

    def fake_run(args, **kwargs):
        calls.append(list(args))
        return subprocess.CompletedProcess(args, 0, b"/opt/toolchain\n", b"")

    monkeypatch.setattr(subprocess, "run", fake_run)
    project = RustAnalyzerProject()
    project.get_sysroot_src()
    assert calls == [["rustc", "--print", "sysroot"]]
    expected = Path("/opt/toolchain", "lib", "rustlib", "src", "rust", "library")
    assert Path(project.sysroot_src) == expected
    assert "Determined toolchain: /opt/toolchain" in capsys.readouterr().out


def test_get_sysroot_src_without_rustc(monkeypatch):
    monkeypatch.delenv("RUST_SRC_PATH", raising=False)

    def missing(args, **kwargs):
        raise FileNotFoundError("rustc")

    monkeypatch.setattr(subprocess, "run", missing)
    project = RustAnalyzerProject()
    with pytest.raises(FileNotFoundError):
        project.get_sysroot_src()
    assert project.sysroot_src == ""