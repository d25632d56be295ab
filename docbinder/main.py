"""
The main entry point for the docbinder command.
"""
import sys
import logging


def main():
    """
    Runs the command-line front end and exits with its status
    (the number of errors the job reported).
    """
    log = logging.getLogger("docbinder")

    try:
        from .cli import run_cli
        status = run_cli()
    except Exception:
        log.exception("A critical error occurred while running the CLI.")
        sys.exit(1)

    sys.exit(status)


if __name__ == '__main__':
    main()
