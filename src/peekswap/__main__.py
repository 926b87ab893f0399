"""Allow ``python -m peekswap``."""

from peekswap.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
