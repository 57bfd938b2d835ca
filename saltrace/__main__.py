"""Entry point for python -m saltrace."""

import sys


def main():
    from saltrace.cli import main as cli_main
    sys.exit(cli_main())


if __name__ == "__main__":
    main()
