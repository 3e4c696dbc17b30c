# modpeek/__main__.py
import sys

from modpeek.cli import main

sys.exit(main())
