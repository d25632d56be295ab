"""
Resolves input names against a search path and downloads remote inputs.

Remote (http/https) inputs are fetched into a private temporary directory
that lives until cleanup() is called.
"""
import logging
import shutil
import tempfile
from pathlib import Path
from urllib.parse import urljoin, urlsplit

import requests

from .config import GlobalConfig


log = logging.getLogger("docbinder")


REMOTE_SCHEMES = ("http", "https")
FETCH_TIMEOUT = 60


def is_url(name: str) -> bool:
    """True if `name` is an http or https URL."""
    return urlsplit(name).scheme.lower() in REMOTE_SCHEMES


def file_directory(name: str) -> str:
    """Returns the directory part of a path or URL ('.' if there is none)."""
    if is_url(name):
        return urljoin(name, ".")
    parent = str(Path(name).parent)
    return parent


def file_extension(name: str) -> str:
    """Returns the lowercase extension without the dot, ignoring any URL query."""
    path = urlsplit(name).path if is_url(name) else name
    return Path(path).suffix.lstrip('.').lower()


def file_basename(name: str) -> str:
    path = urlsplit(name).path if is_url(name) else name
    return Path(path).name


def split_search_path(search_path: str) -> list[str]:
    """Splits a ';'-separated search path into its non-empty directories."""
    return [d for d in (search_path or '').split(';') if d.strip()]


class FileResolver:
    """
    Finds local files on a search path and fetches remote ones.
    Reads proxy, cookies, referer and the local-files lockout from the
    config on every call, so options applied mid-job take effect at once.
    """

    def __init__(self, config: GlobalConfig):
        self.config = config
        self._temp_dir: Path | None = None
        self._downloads: dict[str, Path] = {}


    def find(self, search_path: str, name: str) -> Path | None:
        """Returns a local path for `name`, or None if it cannot be resolved."""
        if not name:
            return None

        if is_url(name):
            return self.fetch(name)

        if self.config.no_local:
            log.error(f"Access to local file '{name}' is disabled.")
            return None

        path = Path(name)
        if path.is_absolute():
            return path if path.is_file() else None

        for directory in split_search_path(search_path):
            if is_url(directory):
                found = self.fetch(urljoin(directory.rstrip('/') + '/', name))
            else:
                candidate = Path(directory) / name
                found = candidate if candidate.is_file() else None
            if found is not None:
                return found

        return path if path.is_file() else None


    def fetch(self, url: str) -> Path | None:
        """Downloads `url` once per job and returns the temporary copy."""
        if url in self._downloads:
            return self._downloads[url]

        headers = {}
        if self.config.cookies:
            headers["Cookie"] = self.config.cookies
        if self.config.referer:
            headers["Referer"] = self.config.referer
        proxies = None
        if self.config.proxy:
            proxies = {"http": self.config.proxy, "https": self.config.proxy}

        log.debug(f"Fetching {url}")
        try:
            resp = requests.get(url, headers=headers, proxies=proxies, timeout=FETCH_TIMEOUT)
            resp.raise_for_status()
        except requests.RequestException as e:
            log.debug(f"Unable to fetch {url}: {e}")
            return None

        if self._temp_dir is None:
            self._temp_dir = Path(tempfile.mkdtemp(prefix="docbinder_"))

        suffix = Path(urlsplit(url).path).suffix or ".html"
        local = self._temp_dir / f"{len(self._downloads):04d}{suffix}"
        local.write_bytes(resp.content)
        self._downloads[url] = local
        return local


    def cleanup(self):
        """Removes all temporary downloads."""
        self._downloads.clear()
        if self._temp_dir is not None:
            shutil.rmtree(self._temp_dir, ignore_errors=True)
            self._temp_dir = None
