"""Global pytest configuration."""

import os

# Tests run against in-process stores and the stub provider before any imports
for var in ("DATABASE_URL", "REDIS_URL", "OPENAI_API_KEY"):
    os.environ.pop(var, None)
os.environ["DEV_MODE"] = "false"
