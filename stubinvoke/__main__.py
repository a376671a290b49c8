"""Allow `python -m stubinvoke`."""

import sys

from .cli import main

sys.exit(main())
