"""Package entry point.

This module enables running the project with:

    python -m direnv_reload [PROJECT_DIR]
"""

from __future__ import annotations

import sys

from direnv_reload.cli import main

if __name__ == "__main__":
    sys.exit(main())
