# Root-level pytest configuration applied to all tests
# - Ensure the repository root is importable so tests can `from models...` and `from database...`
# - Qt widgets render on the offscreen platform; no display is required

import os
import sys
from pathlib import Path

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


def _add_repo_root_to_sys_path() -> None:
    repo_root = Path(__file__).resolve().parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_add_repo_root_to_sys_path()
