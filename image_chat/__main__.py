"""Allow running the package with python -m image_chat."""

import sys

from .main import main

sys.exit(main())
