"""
Root conftest: makes ``src`` and the ``tests.fixtures`` helpers importable
without an installed package.
"""

import sys
from pathlib import Path

# Ensure src and repo root on path
sys.path.insert(0, str(Path(__file__).parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))
