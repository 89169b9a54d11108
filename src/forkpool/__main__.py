"""Allow running forkpool as ``python -m forkpool``."""

from forkpool.cli import main

if __name__ == "__main__":
    main()
