"""Tests for the command line entry point."""

import json

import pytest
from devwidgets import __main__ as cli
from devwidgets.__main__ import main


class TestRsyncCommand:
    """Test the rsync subcommand."""

    def test_default_command(self, capsys):
        """With no options the default command is printed."""
        assert main(["rsync", "--raw"]) == 0
        assert capsys.readouterr().out == "rsync -vzP ./local/path/ user@server:/remote/path/\n"

    def test_exclude_enables_option(self, capsys):
        """Passing a pattern switches --exclude on."""
        main(["rsync", "--raw", "--exclude", "node_modules/"])
        assert capsys.readouterr().out == (
            'rsync -vzP --exclude="node_modules/" ./local/path/ user@server:/remote/path/\n'
        )

    def test_toggles(self, capsys):
        """Toggling flips catalogue defaults."""
        main(["rsync", "--raw", "--toggle", "a", "--toggle", "z", "--toggle=--delete"])
        assert capsys.readouterr().out == "rsync -avP --delete ./local/path/ user@server:/remote/path/\n"

    def test_server_to_server(self, capsys):
        """Source and destination parse from USER@HOST:PATH."""
        main([
            "rsync", "--raw",
            "--direction", "server-to-server",
            "--source", "alice@a.example:/data/",
            "--source-port", "2200",
            "--dest", "bob@b.example:/backup/",
        ])
        assert capsys.readouterr().out == (
            'rsync -vzP -e "ssh -p 2200" alice@a.example:/data/ '
            '--rsync-path="ssh -p 22 bob@b.example rsync" bob@b.example:/backup/\n'
        )

    def test_unknown_toggle(self, capsys):
        """Unknown option flags are an error."""
        assert main(["rsync", "--toggle", "x"]) == 1
        assert "unknown rsync option" in capsys.readouterr().err

    def test_copy(self, capsys, monkeypatch):
        """--copy hands the command to the clipboard."""
        copied = []
        monkeypatch.setattr(cli, "copy_to_clipboard", lambda text: copied.append(text) or True)
        main(["rsync", "--raw", "--copy"])
        assert copied == ["rsync -vzP ./local/path/ user@server:/remote/path/"]


class TestConvertCommand:
    """Test the convert subcommand."""

    def test_markdown_file_to_html(self, tmp_path, capsys):
        """A Markdown file converts to HTML."""
        source = tmp_path / "notes.md"
        source.write_text("# Hi\n\nSome **bold**.\n", encoding="utf-8")
        assert main(["convert", str(source), "--raw"]) == 0
        assert capsys.readouterr().out == "<h1>Hi</h1>\n<p>Some <strong>bold</strong>.</p>\n"

    def test_html_to_markdown(self, tmp_path, capsys):
        """--to markdown reverses the conversion."""
        source = tmp_path / "page.html"
        source.write_text("<h2>Hi</h2>", encoding="utf-8")
        main(["convert", str(source), "--to", "markdown", "--raw"])
        assert capsys.readouterr().out == "## Hi\n"

    def test_document_output_file(self, tmp_path):
        """--document with -o writes a styled standalone page."""
        source = tmp_path / "notes.md"
        source.write_text("# Hi", encoding="utf-8")
        css = tmp_path / "style.css"
        css.write_text("h1 { color: teal; }", encoding="utf-8")
        out = tmp_path / "notes.html"

        assert main(["convert", str(source), "--document", "--css", str(css), "-o", str(out)]) == 0
        html = out.read_text(encoding="utf-8")
        assert "h1 { color: teal; }" in html
        assert "<h1>Hi</h1>" in html

    def test_missing_input(self, tmp_path, capsys):
        """An unreadable input file is reported."""
        assert main(["convert", str(tmp_path / "missing.md")]) == 1
        assert "ERROR" in capsys.readouterr().err


class TestTimerCommand:
    """Test timer option handling (without starting the UI)."""

    def test_print_config_merges_file_and_flags(self, tmp_path, capsys):
        """Flags override the settings file."""
        path = tmp_path / "timer.json"
        path.write_text(json.dumps({"work_minutes": 40, "break_minutes": 8}), encoding="utf-8")

        assert main(["timer", "--config", str(path), "--work", "50", "--auto", "--print-config"]) == 0
        printed = json.loads(capsys.readouterr().out)
        assert printed["work_minutes"] == 50
        assert printed["break_minutes"] == 8
        assert printed["auto_start_breaks"] is True
        assert printed["auto_start_pomodoros"] is True

    def test_no_auto_break_flag(self, tmp_path, capsys):
        """--no-auto-break turns off the default."""
        path = tmp_path / "timer.json"
        path.write_text("{}", encoding="utf-8")
        main(["timer", "--config", str(path), "--no-auto-break", "--print-config"])
        assert json.loads(capsys.readouterr().out)["auto_start_breaks"] is False

    def test_bad_config_exits_with_error(self, tmp_path, capsys):
        """Invalid settings print an error and return 1."""
        path = tmp_path / "timer.json"
        path.write_text('{"work_minutes": 0}', encoding="utf-8")
        assert main(["timer", "--config", str(path)]) == 1
        assert "ERROR" in capsys.readouterr().err

    def test_unreadable_config_exits_with_error(self, tmp_path, capsys):
        """A directory passed as the settings file is an error, not a crash."""
        assert main(["timer", "--config", str(tmp_path)]) == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_non_positive_minutes_rejected(self):
        """argparse rejects zero durations."""
        with pytest.raises(SystemExit):
            main(["timer", "--work", "0"])

    def test_runs_ui_with_configured_machine(self, tmp_path, monkeypatch):
        """The UI receives a machine built from the merged settings."""
        path = tmp_path / "timer.json"
        path.write_text('{"work_minutes": 30}', encoding="utf-8")
        started = []
        monkeypatch.setattr("devwidgets.ui.run_ui", started.append)

        assert main(["timer", "--config", str(path), "--no-notify"]) == 0
        machine = started[0]
        assert machine.settings.work_duration == 1800
        assert machine.effect_handler.enabled is False
