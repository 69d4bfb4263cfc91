"""Shared pytest configuration.

`src.utils.config` validates at import time, so a placeholder API key is set
before any test module imports application code. A real key from .env wins.
"""

import os

from dotenv import load_dotenv

load_dotenv()
os.environ.setdefault("GEMINI_API_KEY", "test_gemini_key")
