from __future__ import annotations

import sys

from . import analysis_cli


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    return analysis_cli.main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
