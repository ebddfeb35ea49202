"""Entry point for the Portico CLI.

Allows running the package directly with ``python -m portico``.
"""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
