"""Allow ``python -m clmm_tickmap``."""

from clmm_tickmap.commands.cli import main

if __name__ == "__main__":
    main()
