import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parent.parent

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from docbinder.core.pipeline import ConversionJob  # noqa: E402
from docbinder.utils.config import GlobalConfig  # noqa: E402


@pytest.fixture
def config():
    return GlobalConfig()


@pytest.fixture
def job():
    job = ConversionJob()
    yield job
    job.cleanup()


@pytest.fixture
def write_html(tmp_path):
    """Writes a small HTML file under tmp_path and returns its path."""
    def _write(relative: str, heading: str = "Title", body: str = "<p>text</p>") -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            f"<html><head><title>{heading}</title></head>"
            f"<body><h1>{heading}</h1>{body}</body></html>",
            encoding="utf-8",
        )
        return path
    return _write
