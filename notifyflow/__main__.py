"""Entry point for ``python -m notifyflow``."""

from notifyflow.cli import main

if __name__ == "__main__":
    main()
