"""Entry point: uv run run.py --in playbook.txt"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure src/ is on the path for direct execution
sys.path.insert(0, str(Path(__file__).parent / "src"))

from webplay.cli import main


if __name__ == "__main__":
    sys.exit(main())
