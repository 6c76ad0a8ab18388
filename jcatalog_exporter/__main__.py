"""Allow ``python -m jcatalog_exporter`` to run the standalone exporter."""

import sys

from .cli import main

sys.exit(main())
