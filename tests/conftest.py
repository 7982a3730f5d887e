import os
import sys
import tempfile

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Tests drop and recreate tables, so never point them at a real database.
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.gettempdir(), "rooms_test.db")
os.environ.pop("REDIS_URL", None)
os.environ.pop("ROOMS_SERVICE_URL", None)
os.environ["LOG_FORMAT"] = "console"
