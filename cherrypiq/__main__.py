"""Module entrypoint for ``python -m cherrypiq``.

All argument parsing and runtime setup happen in ``cherrypiq.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
