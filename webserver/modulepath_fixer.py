"""
Makes the shared `modules` and `utils` packages importable from this
Pulumi program by putting the repository root on the module search path.

Not needed when the repository is installed (`pip install -e .`) or when
`PYTHONPATH` already points at the repository root, as it does in CI.
"""

from pathlib import Path
import sys
import os

path_root = str(Path(__file__).resolve().parents[1])
if os.environ.get("CI") != "true" and path_root not in sys.path:
    sys.path.append(path_root)
