"""
Handles the command line (and CGI invocation) and runs the conversion job.
This is the entry point for the console script.
"""
import logging
import os
import signal
import sys
import time
from pathlib import Path
from typing import Mapping

from .core.cgi_adapter import CGIAdapter, is_cgi_request
from .core.export import Renderer
from .core.options import VersionRequested
from .core.pipeline import ConversionJob
from .core.preferences import PreferencesStore, default_rc_path
from .core.renderer import BasicRenderer
from .utils.config import GlobalConfig, VERSION
from .utils.errors import ConfigurationError, UsageError
from .utils.logger import setup_main_logger


log = logging.getLogger("docbinder")


DATA_DIR_ENV = "DOCBINDER_DATA"
DEBUG_ENV = "DOCBINDER_DEBUG"


USAGE = f"""\
docbinder version {VERSION}

Usage:
  docbinder [options] filename1.html [ ... filenameN.html ]
  docbinder filename.book

Options:
  --batch filename.book
  --bodycolor color
  --bodyfont {{courier,helvetica,monospace,sans,serif,times}}
  --bodyimage filename.{{bmp,gif,jpg,png}}
  --book
  --bottom margin{{in,cm,mm}}
  --browserwidth pixels
  --charset {{cp-874...1258,iso-8859-1...8859-15,koi8-r}}
  --color
  --compression[=level]
  --continuous
  --cookies 'name="value with space"; name=value'
  --datadir directory
  --duplex
  --effectduration {{0.1..10.0}}
  --embedfonts
  --encryption
  --firstpage {{p1,toc,c1}}
  --fontsize {{4.0..24.0}}
  --fontspacing {{1.0..3.0}}
  --footer fff
  {{--format, -t}} {{epub,html,htmlsep,pdf11,pdf12,pdf13,pdf14,ps1,ps2,ps3}}
  --gray
  --header fff
  --header1 fff
  --headfootfont {{courier{{-bold,-oblique,-boldoblique}},
                  helvetica{{-bold,-oblique,-boldoblique}},
                  monospace{{-bold,-oblique,-boldoblique}},
                  sans{{-bold,-oblique,-boldoblique}},
                  serif{{-bold,-italic,-bolditalic}},
                  times{{-roman,-bold,-italic,-bolditalic}}}}
  --headfootsize {{6.0..24.0}}
  --headingfont {{courier,helvetica,monospace,sans,serif,times}}
  --help
  --hfimageN filename.{{bmp,gif,jpg,png}}
  --jpeg[=quality]
  --landscape
  --left margin{{in,cm,mm}}
  --letterhead filename.{{bmp,gif,jpg,png}}
  --linkcolor color
  --links
  --linkstyle {{plain,underline}}
  --logoimage filename.{{bmp,gif,jpg,png}}
  --no-compression
  --no-duplex
  --no-embedfonts
  --no-encryption
  --no-jpeg
  --no-links
  --no-localfiles
  --no-numbered
  --no-overflow
  --no-pscommands
  --no-strict
  --no-title
  --no-toc
  --numbered
  --nup {{1,2,4,6,9,16}}
  {{--outdir, -d}} dirname
  {{--outfile, -f}} filename.{{epub,html,pdf,ps}}
  --overflow
  --owner-password password
  --pageduration {{1.0..60.0}}
  --pageeffect {{none,bi,bo,d,gd,gdr,gr,hb,hsi,hso,vb,vsi,vso,wd,wl,wr,wu}}
  --pagelayout {{single,one,twoleft,tworight}}
  --pagemode {{document,outline,fullscreen}}
  --path "dir1;dir2;dir3;...;dirN"
  --permissions {{all,annotate,copy,modify,print,no-annotate,no-copy,no-modify,no-print,none}}
  --portrait
  --pre-indent margin{{in,cm,mm}}
  --proxy http://host:port
  --pscommands
  --quiet
  --referer url
  --right margin{{in,cm,mm}}
  --size {{letter,a4,WxH{{in,cm,mm}},etc}}
  --strict
  --textcolor color
  --textfont {{courier,helvetica,monospace,sans,serif,times}}
  --title
  --titlefile filename.{{htm,html,shtml}}
  --titleimage filename.{{bmp,gif,jpg,png}}
  --tocfooter fff
  --tocheader fff
  --toclevels levels
  --toctitle string
  --top margin{{in,cm,mm}}
  --user-password password
  {{--verbose, -v}}
  --version
  --webpage
  --xrxcomments

  fff = heading format string; each 'f' can be one of:

        . = blank
        / = n/N arabic page numbers (1/3, 2/3, 3/3)
        : = c/C arabic chapter page numbers (1/2, 2/2, 1/4, 2/4, ...)
        1 = arabic numbers (1, 2, 3, ...)
        a = lowercase letters
        A = uppercase letters
        c = current chapter heading
        C = current chapter page number (arabic)
        d = current date
        D = current date and time
        h = current heading
        i = lowercase roman numerals
        I = uppercase roman numerals
        l = logo image
        t = title text
        T = current time
        u = current file/URL
"""


def print_usage(message: str = ""):
    """Writes the diagnostic (if any) and the usage text to stderr."""
    if message:
        print(f"ERROR: {message}", file=sys.stderr)
    print(USAGE, file=sys.stderr, end="")


def print_cgi_error(message: str):
    """CGI clients get fatal diagnostics as a plain-text response."""
    sys.stdout.write("Content-Type: text/plain\r\n\r\n")
    sys.stdout.write(f"docbinder {VERSION} is installed as a CGI program.\n\n")
    sys.stdout.write(f"ERROR: {message}\n")
    sys.stdout.flush()


def install_signal_handler(job: ConversionJob):
    """
    On SIGTERM, remove temporary downloads and exit with status 1.
    Returns the handler that was replaced.
    """
    def handler(signum, frame):
        job.cleanup()
        os._exit(1)

    previous = signal.signal(signal.SIGTERM, handler)
    return signal.SIG_DFL if previous is None else previous


def run_cli(argv: list[str] | None = None, environ: Mapping[str, str] | None = None,
            renderer: Renderer | None = None) -> int:
    """
    Runs one job and returns the exit status: the number of errors,
    1 for a usage or configuration error, 0 for --version.
    """
    argv = sys.argv[1:] if argv is None else argv
    environ = os.environ if environ is None else environ
    start_time = time.perf_counter()

    setup_main_logger(logging.WARNING)

    config = GlobalConfig()
    if environ.get(DATA_DIR_ENV):
        config.data_dir = Path(environ[DATA_DIR_ENV])

    job = ConversionJob(config)
    previous_handler = install_signal_handler(job)

    try:
        if is_cgi_request(environ):
            # The command line cannot be trusted in CGI mode
            status = _prepare_cgi(job, environ)
            if status:
                return status
        else:
            PreferencesStore(config, default_rc_path(config, environ)).load()
            if job.parser.wants_version(argv):
                print(VERSION)
                return 0
            job.parser.parse(argv)

        if job.parser.num_files == 0 or len(job.document) == 0:
            raise UsageError("No HTML files!")

        load_time = time.perf_counter()

        toc = job.build_toc()
        render_errors = job.export(renderer if renderer is not None else BasicRenderer(config), toc)

        end_time = time.perf_counter()
        debug = environ.get(DEBUG_ENV, "")
        if "all" in debug or "timing" in debug:
            print(f"TIMING: {load_time - start_time:.3f} {end_time - load_time:.3f} "
                  f"{end_time - start_time:.3f}", file=sys.stderr)

        return job.error_count + render_errors

    except VersionRequested:
        print(VERSION)
        return 0
    except UsageError as e:
        if config.cgi_mode:
            print_cgi_error(str(e) or "Bad request.")
        else:
            print_usage(str(e))
        return 1
    finally:
        job.cleanup()
        signal.signal(signal.SIGTERM, previous_handler)


def _prepare_cgi(job: ConversionJob, environ: Mapping[str, str]) -> int:
    """Configures a CGI job and queues the requested document. Returns 0 on success."""
    adapter = CGIAdapter(job.config, job.selector, environ)

    if not adapter.configure(job.loader):
        print_cgi_error("Unable to load the directory's book file.")
        return max(job.error_count, 1)

    try:
        url = adapter.request_url()
    except ConfigurationError as e:
        log.error(str(e))
        print_cgi_error(str(e))
        return 1

    log.info(f"docbinder converting \"{url}\".")
    job.parser.num_files += 1
    # Always a document, even when the URL names a book file
    job.assembler.append(url, job.config.path)
    return 0
