"""
Tests for file resolution and remote fetching (docbinder/utils/files.py)

Run: python -m pytest tests/test_files.py -q
"""
import pytest
import requests

from docbinder.utils import files
from docbinder.utils.files import (
    FileResolver, file_basename, file_directory, file_extension, is_url, split_search_path,
)


class FakeResponse:
    def __init__(self, content=b"<h1>remote</h1>", status=200):
        self.content = content
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status}")


@pytest.fixture
def fake_get(monkeypatch):
    calls = []

    def get(url, headers=None, proxies=None, timeout=None):
        calls.append({"url": url, "headers": headers, "proxies": proxies, "timeout": timeout})
        if url.endswith("missing.html"):
            return FakeResponse(status=404)
        return FakeResponse()

    monkeypatch.setattr(files.requests, "get", get)
    return calls


class TestHelpers:

    def test_is_url(self):
        assert is_url("https://example.com/a.html")
        assert not is_url("ftp://example.com/a.html")
        assert not is_url("chapter.html")

    def test_names(self):
        assert file_extension("http://example.com/a/Notes.MD?x=1") == "md"
        assert file_extension("dir/book.BOOK") == "book"
        assert file_basename("http://example.com/a/b.html") == "b.html"
        assert file_directory("http://example.com/a/b.html") == "http://example.com/a/"
        assert file_directory("b.html") == "."

    def test_split_search_path(self):
        assert split_search_path("a;;b; ") == ["a", "b"]
        assert split_search_path("") == []


class TestFind:

    def test_search_path_order(self, config, tmp_path):
        (tmp_path / "one").mkdir()
        (tmp_path / "two").mkdir()
        (tmp_path / "two" / "x.html").write_text("x")
        resolver = FileResolver(config)

        found = resolver.find(f"{tmp_path / 'one'};{tmp_path / 'two'}", "x.html")

        assert found == tmp_path / "two" / "x.html"

    def test_current_directory_fallback(self, config, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "here.html").write_text("x")

        assert FileResolver(config).find("", "here.html").name == "here.html"

    def test_not_found(self, config, tmp_path):
        assert FileResolver(config).find(str(tmp_path), "nothing.html") is None

    def test_local_lockout(self, config, tmp_path):
        (tmp_path / "x.html").write_text("x")
        config.no_local = True
        assert FileResolver(config).find(str(tmp_path), str(tmp_path / "x.html")) is None


class TestFetch:

    def test_headers_and_proxy(self, config, fake_get):
        config.cookies = "sid=1"
        config.referer = "http://example.com/"
        config.proxy = "http://proxy:3128"
        resolver = FileResolver(config)

        local = resolver.fetch("http://example.com/doc.html")

        assert local.read_bytes() == b"<h1>remote</h1>"
        assert fake_get[0]["headers"] == {"Cookie": "sid=1", "Referer": "http://example.com/"}
        assert fake_get[0]["proxies"] == {"http": "http://proxy:3128", "https": "http://proxy:3128"}
        assert fake_get[0]["timeout"] == files.FETCH_TIMEOUT
        resolver.cleanup()

    def test_downloads_are_cached_and_cleaned_up(self, config, fake_get):
        resolver = FileResolver(config)

        first = resolver.find("", "http://example.com/doc.html")
        second = resolver.find("", "http://example.com/doc.html")

        assert first == second
        assert len(fake_get) == 1
        resolver.cleanup()
        assert not first.exists()

    def test_url_directories_on_the_search_path(self, config, fake_get):
        resolver = FileResolver(config)

        found = resolver.find("http://example.com/docs", "page.html")

        assert found is not None
        assert fake_get[0]["url"] == "http://example.com/docs/page.html"
        resolver.cleanup()

    def test_http_errors_are_not_found(self, config, fake_get):
        resolver = FileResolver(config)
        assert resolver.fetch("http://example.com/missing.html") is None

    def test_remote_input_ignores_local_lockout(self, config, fake_get):
        config.no_local = True
        resolver = FileResolver(config)
        assert resolver.find("", "http://example.com/doc.html") is not None
        resolver.cleanup()
