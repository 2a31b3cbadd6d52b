"""Allow ``python -m filesplitter.splitter``."""

import sys

from .cli import main

sys.exit(main())
