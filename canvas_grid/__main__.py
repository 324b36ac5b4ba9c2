"""Entry point for ``python -m canvas_grid``."""

from .cli.commands import main

if __name__ == "__main__":
    main()
