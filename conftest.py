"""Global pytest configuration."""

import os
import tempfile

# Keep test runs out of ./data and away from a real key, before any imports
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="venosim-tests-"))
os.environ["OPENAI_API_KEY"] = ""
