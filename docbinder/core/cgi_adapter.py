"""
Running as a CGI program.

In CGI mode the command line is ignored. The job converts the document
named by the request (PATH_INFO) to PDF on standard output, optionally
tuned by a ".book" file next to it, and never reads other local files.
"""
import logging
from pathlib import Path
from typing import Mapping
from urllib.parse import quote

from .book_script import BookScriptLoader
from .export import ExportSelector, PdfTarget
from ..utils.config import (
    GlobalConfig, OutputType, PDF_PAGE_MODE_DOCUMENT, PDF_FIRST_PAGE_P1, VERSION,
)
from ..utils.errors import ConfigurationError


log = logging.getLogger("docbinder")


NOCGI_VAR = "DOCBINDER_NOCGI"
CGI_TRIGGER_VARS = ("GATEWAY_INTERFACE", "SERVER_NAME", "SERVER_SOFTWARE")
CGI_BOOK_NAME = ".book"


def is_cgi_request(environ: Mapping[str, str]) -> bool:
    """True when started by a web server and not explicitly opted out."""
    if NOCGI_VAR in environ:
        return False
    return all(var in environ for var in CGI_TRIGGER_VARS)


class CGIAdapter:
    """Forces the CGI configuration and works out the document to convert."""

    def __init__(self, config: GlobalConfig, selector: ExportSelector,
                 environ: Mapping[str, str]):
        self.config = config
        self.selector = selector
        self.environ = environ


    def configure(self, loader: BookScriptLoader) -> bool:
        """
        Applies the CGI settings and the directory's book file, if any.
        Returns False if a book file exists but could not be loaded.
        """
        cfg = self.config
        cfg.cgi_mode = True
        cfg.toc_levels = 0
        cfg.title_page = False
        cfg.output_path = ""
        cfg.output_files = False
        cfg.output_type = OutputType.WEBPAGES
        cfg.pdf_page_mode = PDF_PAGE_MODE_DOCUMENT
        cfg.pdf_first_page = PDF_FIRST_PAGE_P1
        self.selector.force(PdfTarget(14))

        cfg.cookies = self.environ.get("HTTP_COOKIE", "")
        cfg.referer = self.environ.get("HTTP_REFERER", "")

        log.info(f"docbinder {VERSION} starting in CGI mode.")
        log.info(f"TMPDIR is \"{self.environ.get('TMPDIR', '')}\"")

        book = self.find_book()
        if book is None:
            cfg.no_local = True
            return True

        log.info(f"Using book file {book}")
        return loader.load(book, set_nolocal=True)


    def find_book(self) -> str | None:
        """
        The first existing of $PATH_TRANSLATED.book,
        `dirname $PATH_TRANSLATED`/.book and ./.book.
        """
        candidates = []
        translated = self.environ.get("PATH_TRANSLATED")
        if translated:
            candidates.append(f"{translated}.book")
            candidates.append(str(Path(translated).parent / CGI_BOOK_NAME))
        candidates.append(CGI_BOOK_NAME)

        for candidate in candidates:
            if Path(candidate).is_file():
                return candidate
        return None


    def request_url(self) -> str:
        """
        Rebuilds the URL of the requested document.

        Raises:
            ConfigurationError: if PATH_INFO or SERVER_PORT is missing.
        """
        path_info = self.environ.get("PATH_INFO")
        port = self.environ.get("SERVER_PORT")
        if not path_info:
            raise ConfigurationError("PATH_INFO is not set in the environment!")
        if not port:
            raise ConfigurationError("SERVER_PORT is not set in the environment!")

        https = self.environ.get("HTTPS")
        scheme = "https" if https and https.lower() != "off" else "http"
        host = self.environ.get("SERVER_NAME", "")

        url = f"{scheme}://{host}:{port}{quote(path_info, safe='/')}"

        # The query string arrives already encoded
        query = self.environ.get("QUERY_STRING")
        if query and not query.startswith('-'):
            url += "?" + query

        return url
