"""Root conftest: put the project root on ``sys.path`` so ``main`` and the namespace packages import."""

import sys
from pathlib import Path

_APP_DIR = str(Path(__file__).resolve().parent)
if _APP_DIR not in sys.path:
    sys.path.insert(0, _APP_DIR)
