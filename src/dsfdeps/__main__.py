"""Module entrypoint for `python -m dsfdeps`."""

from __future__ import annotations

from dsfdeps.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
