"""``python -m markupclean``: sanitize a file or stdin from the shell."""

import sys

from markupclean.cli import main

if __name__ == "__main__":
    sys.exit(main())
