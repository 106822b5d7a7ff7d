"""Test configuration.

Settings are read from the environment when ``app.config`` is first
imported, so the overrides below must run before any test module imports
the application.
"""

import os
import sys
import tempfile

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

_db_dir = tempfile.mkdtemp(prefix="spin-wheel-tests-")

os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["GEMINI_API_KEY"] = ""
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["WHEEL_MIN_DURATION_MS"] = "40"
os.environ["WHEEL_MAX_DURATION_MS"] = "60"
os.environ["WHEEL_FRAME_INTERVAL_MS"] = "5"
os.environ["QUOTE_TIMEOUT_SECONDS"] = "1.0"
os.environ["REGISTER_RATE_LIMIT"] = "1000/minute"
