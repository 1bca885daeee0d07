"""
Root conftest.py to configure pytest for all test discovery.

Adds the project root to the Python path so `import src.notifypatch` works
no matter where pytest is started from.
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))
