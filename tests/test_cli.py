"""
Tests for the command-line front end (docbinder/cli.py)

Run: python -m pytest tests/test_cli.py -q
"""
import signal

import pytest

from docbinder import cli
from docbinder.cli import install_signal_handler, run_cli
from docbinder.core.pipeline import ConversionJob
from docbinder.utils import files
from docbinder.utils.config import VERSION


def env_for(tmp_path, **extra):
    env = {"HOME": str(tmp_path), "DOCBINDER_NOCGI": "1"}
    env.update(extra)
    return env


class TestRun:

    def test_single_html_output(self, tmp_path, write_html):
        write_html("a.html", "Alpha")
        write_html("b.html", "Beta")
        out = tmp_path / "out.html"

        status = run_cli(
            ["-f", str(out), str(tmp_path / "a.html"), str(tmp_path / "b.html")], env_for(tmp_path))

        assert status == 0
        text = out.read_text(encoding="utf-8")
        assert "Alpha" in text and "Beta" in text
        assert 'id="toc"' in text

    def test_htmlsep_output(self, tmp_path, write_html):
        write_html("a.html", "Alpha")
        (tmp_path / "notes.md").write_text("# Notes\n", encoding="utf-8")
        outdir = tmp_path / "site"

        status = run_cli(["-t", "htmlsep", "-d", str(outdir), "--path", str(tmp_path),
                          "a.html", "notes.md"], env_for(tmp_path))

        assert status == 0
        assert sorted(p.name for p in outdir.iterdir()) == ["a.html", "index.html", "notes.html"]
        assert 'href="notes.html#notes"' in (outdir / "index.html").read_text(encoding="utf-8")

    def test_missing_file_counts_as_error(self, tmp_path, write_html):
        write_html("a.html")
        out = tmp_path / "out.html"

        status = run_cli(["-f", str(out), str(tmp_path / "a.html"), str(tmp_path / "missing.html")],
                         env_for(tmp_path))

        assert status == 1
        assert out.exists()

    def test_unrendered_target_reports_error(self, tmp_path, write_html):
        write_html("a.html")
        status = run_cli(["-f", str(tmp_path / "out.pdf"), str(tmp_path / "a.html")], env_for(tmp_path))
        assert status == 1

    def test_preferences_are_loaded_first(self, tmp_path, write_html):
        (tmp_path / ".docbinderrc").write_text("TOCTITLE=From Prefs\n", encoding="utf-8")
        write_html("a.html")
        out = tmp_path / "out.html"

        run_cli(["-f", str(out), str(tmp_path / "a.html")], env_for(tmp_path))

        assert "From Prefs" in out.read_text(encoding="utf-8")

    def test_timing_line(self, tmp_path, write_html, capsys):
        write_html("a.html")
        run_cli(["-f", str(tmp_path / "out.html"), str(tmp_path / "a.html")],
                env_for(tmp_path, DOCBINDER_DEBUG="timing"))
        assert "TIMING:" in capsys.readouterr().err


class TestUsage:

    def test_version(self, tmp_path, capsys):
        assert run_cli(["--bogus-later", "--version"], env_for(tmp_path)) == 0
        assert capsys.readouterr().out.strip() == VERSION

    def test_no_files(self, tmp_path, capsys):
        assert run_cli(["--toclevels", "2"], env_for(tmp_path)) == 1
        err = capsys.readouterr().err
        assert "ERROR: No HTML files!" in err
        assert "Usage:" in err

    def test_only_missing_files(self, tmp_path, capsys):
        assert run_cli([str(tmp_path / "nope.html")], env_for(tmp_path)) == 1
        assert "No HTML files!" in capsys.readouterr().err

    def test_help(self, tmp_path, capsys):
        assert run_cli(["--help"], env_for(tmp_path)) == 1
        err = capsys.readouterr().err
        assert "Usage:" in err
        assert "ERROR" not in err

    def test_bad_option(self, tmp_path, capsys):
        assert run_cli(["--frobnicate"], env_for(tmp_path)) == 1
        assert "Bad option argument" in capsys.readouterr().err

    def test_missing_value(self, tmp_path, capsys):
        assert run_cli(["a.html", "--toclevels"], env_for(tmp_path)) == 1
        assert "Missing value" in capsys.readouterr().err


class FakeResponse:
    content = b"<h1>remote</h1>"

    def raise_for_status(self):
        pass


@pytest.fixture
def restore_sigterm():
    original = signal.getsignal(signal.SIGTERM)
    yield original
    signal.signal(signal.SIGTERM, original)


class TestSignals:

    def test_sigterm_removes_downloads_and_exits(self, restore_sigterm, monkeypatch):
        exits = []
        monkeypatch.setattr(cli.os, "_exit", exits.append)
        monkeypatch.setattr(files.requests, "get", lambda url, **kwargs: FakeResponse())
        job = ConversionJob()
        local = job.resolver.fetch("http://example.com/doc.html")
        assert local.exists()

        previous = install_signal_handler(job)
        signal.getsignal(signal.SIGTERM)(signal.SIGTERM, None)

        assert previous == restore_sigterm
        assert not local.parent.exists()
        assert exits == [1]

    def test_run_restores_previous_handler(self, restore_sigterm, tmp_path, write_html):
        write_html("a.html")

        run_cli(["-f", str(tmp_path / "out.html"), str(tmp_path / "a.html")], env_for(tmp_path))

        assert signal.getsignal(signal.SIGTERM) == restore_sigterm
