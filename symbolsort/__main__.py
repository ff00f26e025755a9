"""Module entrypoint for ``python -m symbolsort``.

Argument parsing, loading and report writing happen in ``symbolsort.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
