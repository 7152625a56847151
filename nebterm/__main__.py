"""Allow `python -m nebterm`."""

import sys

from nebterm.cli import main

sys.exit(main())
