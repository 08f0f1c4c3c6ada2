"""Enable `python -m wobj` entry point."""

from wobj.cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
