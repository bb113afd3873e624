import subprocess

import pytest

from rustdrills.exercise import Exercise, ExerciseFailed, Mode
from rustdrills.verify import prompt_for_completion, test, verify

PENDING_SOURCE = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED_SOURCE = "// fake_exercise\n\nfn main() {\n\n}\n"


def make_exercise(tmp_path, name, source, mode=Mode.COMPILE, hint="Hello!"):
    path = tmp_path / f"{name}.rs"
    path.write_text(source, encoding="utf-8")
    return Exercise(name=name, path=path, mode=mode, hint=hint)


@pytest.fixture
def fake_tools(monkeypatch):
    settings = {"compile_ok": True, "run_ok": True, "stdout": b"", "stderr": b""}
    calls = []

    def fake_run(args, **kwargs):
        calls.append(list(args))
        if args[0] == "rustc":
            code = 0 if settings["compile_ok"] else 1
            err = b"" if settings["compile_ok"] else settings["stderr"]
            return subprocess.CompletedProcess(args, code, b"", err)
        code = 0 if settings["run_ok"] else 101
        return subprocess.CompletedProcess(args, code, settings["stdout"], settings["stderr"])

    monkeypatch.setattr(subprocess, "run", fake_run)
    return settings, calls


def test_verify_all_done_returns_none(tmp_path, fake_tools):
    exercises = [
        make_exercise(tmp_path, "one", FINISHED_SOURCE),
        make_exercise(tmp_path, "two", FINISHED_SOURCE, mode=Mode.TEST),
    ]
    assert verify(exercises, (0, len(exercises)), False, False) is None


def test_verify_returns_pending_exercise(tmp_path, fake_tools, capsys):
    pending = make_exercise(tmp_path, "pending_exercise", PENDING_SOURCE)
    assert verify([pending], (0, 1), False, False) is pending
    out = capsys.readouterr().out
    assert "I AM NOT DONE" in out
    assert f"Successfully ran {pending}!" in out


def test_verify_stops_at_first_failure(tmp_path, fake_tools, capsys):
    settings, calls = fake_tools
    settings["compile_ok"] = False
    settings["stderr"] = b"error: expected pattern"
    first = make_exercise(tmp_path, "compFailure", FINISHED_SOURCE)
    second = make_exercise(tmp_path, "other", FINISHED_SOURCE)
    assert verify([first, second], (0, 2), False, False) is first
    assert len(calls) == 1
    out = capsys.readouterr().out
    assert "error: expected pattern" in out
    assert f"Compiling of {first} failed! Please try again." in out


def test_verify_reports_run_errors(tmp_path, fake_tools, capsys):
    settings, _ = fake_tools
    settings["run_ok"] = False
    settings["stdout"] = b"partial output"
    exercise = make_exercise(tmp_path, "crash", FINISHED_SOURCE)
    assert verify([exercise], (0, 1), False, False) is exercise
    out = capsys.readouterr().out
    assert f"Ran {exercise} with errors" in out
    assert "partial output" in out


def test_test_verbose_shows_output(tmp_path, fake_tools, capsys):
    settings, calls = fake_tools
    settings["stdout"] = b"THIS TEST TOO SHALL PASS"
    exercise = make_exercise(tmp_path, "testSuccess", FINISHED_SOURCE, mode=Mode.TEST)
    test(exercise, True)
    assert "THIS TEST TOO SHALL PASS" in capsys.readouterr().out
    assert calls[0][:2] == ["rustc", "--test"]
    assert calls[1][1] == "--show-output"


def test_test_quiet_hides_output(tmp_path, fake_tools, capsys):
    settings, _ = fake_tools
    settings["stdout"] = b"THIS TEST TOO SHALL PASS"
    exercise = make_exercise(tmp_path, "testSuccess", FINISHED_SOURCE, mode=Mode.TEST)
    test(exercise, False)
    assert "THIS TEST TOO SHALL PASS" not in capsys.readouterr().out


def test_test_failure_raises(tmp_path, fake_tools, capsys):
    settings, _ = fake_tools
    settings["run_ok"] = False
    settings["stdout"] = b"assertion failed"
    exercise = make_exercise(tmp_path, "testNotPassed", FINISHED_SOURCE, mode=Mode.TEST)
    with pytest.raises(ExerciseFailed):
        test(exercise, False)
    out = capsys.readouterr().out
    assert f"Testing of {exercise} failed!" in out
    assert "assertion failed" in out


def test_test_does_not_prompt_for_pending(tmp_path, fake_tools, capsys):
    exercise = make_exercise(tmp_path, "pending_test_exercise", PENDING_SOURCE, mode=Mode.TEST)
    test(exercise, False)
    assert "I AM NOT DONE" not in capsys.readouterr().out


def test_prompt_for_completion_done(tmp_path, capsys):
    exercise = make_exercise(tmp_path, "finished_exercise", FINISHED_SOURCE)
    assert prompt_for_completion(exercise, "ignored", True) is True
    assert capsys.readouterr().out == ""


def test_prompt_for_completion_pending(tmp_path, capsys, monkeypatch):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    exercise = make_exercise(tmp_path, "pending_exercise", PENDING_SOURCE, hint="Hello!")
    assert prompt_for_completion(exercise, "program says hi", True) is False
    out = capsys.readouterr().out
    assert "🎉 🎉  The code is compiling! 🎉 🎉" in out
    assert "Output:" in out
    assert "program says hi" in out
    assert "Hints:" in out
    assert "Hello!" in out
    assert " 3 |  // I AM NOT DONE" in out
    assert " 1 |  // fake_exercise" in out


def test_prompt_for_completion_no_emoji(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "1")
    exercise = make_exercise(tmp_path, "pending_exercise", PENDING_SOURCE, mode=Mode.CLIPPY)
    assert prompt_for_completion(exercise, None, False) is False
    out = capsys.readouterr().out
    assert "~*~ The code is compiling, and Clippy is happy! ~*~" in out
    assert "Output:" not in out
    assert "Hints:" not in out