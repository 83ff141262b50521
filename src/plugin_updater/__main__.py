"""Allow ``python -m plugin_updater``."""

import sys

from plugin_updater.cli import main

sys.exit(main())
