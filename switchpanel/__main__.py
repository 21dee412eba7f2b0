"""``python -m switchpanel`` — startup banner, then the switch panel CLI.

Examples:
  switchpanel --url https://panel.local --username admin --password <PW> watch

  switchpanel devices list

  switchpanel sections add-combo 3
"""

from __future__ import annotations

import os
import sys

from tabulate import tabulate

from switchpanel import __version__, configure_logging
from switchpanel import glogger


def _print_startup_banner() -> None:
    startup_rows = [
        ["version", __version__],
        ["backend", os.environ.get("SWITCHPANEL_URL", "http://localhost:8080")],
    ]

    for var in ("GITHUB_REF", "GITHUB_SHA", "BUILDTIME"):
        val = os.environ.get(var)
        if val and not val.endswith("_is_undefined"):
            startup_rows.append([var, val])

    table_str = tabulate(startup_rows, tablefmt="mixed_grid")
    lines = table_str.split("\n")
    table_width = len(lines[0])
    title = "switchpanel starting up"
    title_border = "┍" + "━" * (table_width - 2) + "┑"
    title_row = "│ " + title.center(table_width - 4) + " │"
    separator = lines[0].replace("┍", "┝").replace("┑", "┥").replace("┯", "┿")

    glogger.opt(raw=True).info(
        "\n{}\n", title_border + "\n" + title_row + "\n" + separator + "\n" + "\n".join(lines[1:])
    )


def main() -> None:
    """Main entry point — banner, then hand off to the CLI."""
    configure_logging()
    if len(sys.argv) < 2 or sys.argv[1] not in ("-h", "--help"):
        _print_startup_banner()

    from switchpanel.cli import main as cli_main

    cli_main(sys.argv[1:])


if __name__ == "__main__":
    main()
