from __future__ import annotations

import sys
from pathlib import Path

# Ensure the repository root is importable (so `import semver_ranges` works without installing)
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
