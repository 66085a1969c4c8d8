"""Allow ``python -m mokkun``."""

import sys

from .cli import main


sys.exit(main())
