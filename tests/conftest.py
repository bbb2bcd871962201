"""Shared test setup: environment seeded before config.py is imported."""

from __future__ import annotations

import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("MICROSOFT_APP_ID", "")
os.environ.setdefault("MICROSOFT_APP_PASSWORD", "")
