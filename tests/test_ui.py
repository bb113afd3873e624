import pytest

from rustdrills import ui


def test_no_emoji_follows_environment(monkeypatch):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    assert ui.no_emoji() is False
    monkeypatch.setenv("NO_EMOJI", "1")
    assert ui.no_emoji() is True


def test_warn_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.warn("Ran intro1 with errors")
    assert capsys.readouterr().out == "! Ran intro1 with errors\n"


def test_warn_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    ui.warn("Ran intro1 with errors")
    assert capsys.readouterr().out == "⚠️  Ran intro1 with errors\n"


def test_success_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.success("Successfully ran intro1")
    assert capsys.readouterr().out == "✓ Successfully ran intro1\n"


def test_success_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    ui.success("Successfully ran intro1")
    assert capsys.readouterr().out == "✅ Successfully ran intro1\n"


def test_output_is_not_coloured_when_not_a_terminal(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.success("plain")
    assert "\x1b[" not in capsys.readouterr().out


def test_spinner_message_updates():
    spinner = ui.Spinner("Compiling intro1...")
    assert spinner.message == "Compiling intro1..."
    spinner.set_message("Running intro1...")
    assert spinner.message == "Running intro1..."
    spinner.finish_and_clear()
    assert spinner.finished is True


def test_spinner_context_manager_finishes(capsys):
    with ui.Spinner("Testing intro1...") as spinner:
        assert spinner.finished is False
    assert spinner.finished is True
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


@pytest.mark.parametrize("calls", [1, 2, 3])
def test_finish_and_clear_is_idempotent(calls, capsys):
    spinner = ui.Spinner("x")
    for _ in range(calls):
        spinner.finish_and_clear()
    assert spinner.finished is True
    assert capsys.readouterr().err == ""