"""Entry point for ``python -m mac_icon_fetcher``."""

import sys

from mac_icon_fetcher.cli.commands import cli_main


def main() -> int:
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
