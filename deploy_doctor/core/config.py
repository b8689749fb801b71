"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    DEPLOY_TIMEOUT_SECONDS     — Max seconds to watch a deployment log (default: 600)
    LOG_POLL_INTERVAL_SECONDS  — Seconds between log polls (default: 5)
    MAX_LOG_CHARS              — Log text is truncated to this many chars (default: 120000)
    LATEST_LOG_COUNT           — Timestamped tail lines returned by the API (default: 10)
    OUTPUT_DIR                 — Where deployment log snapshots are written
    LOG_DIR                    — Where application log files are written
    ENABLE_AUTOFIX_ENDPOINT    — Enable POST /api/auto-fix (default: false)

Auto-Fix Endpoint:
    The auto-fix endpoint rewrites files on the host running the service.
    It stays disabled unless ENABLE_AUTOFIX_ENDPOINT=true.
"""
import os
from dotenv import load_dotenv

load_dotenv()

DEPLOY_TIMEOUT_SECONDS = float(os.getenv("DEPLOY_TIMEOUT_SECONDS", 600))
LOG_POLL_INTERVAL_SECONDS = float(os.getenv("LOG_POLL_INTERVAL_SECONDS", 5))
MAX_LOG_CHARS = int(os.getenv("MAX_LOG_CHARS", 120000))
LATEST_LOG_COUNT = int(os.getenv("LATEST_LOG_COUNT", 10))

OUTPUT_DIR = os.getenv("OUTPUT_DIR", os.path.join("output", "deploy-doctor"))
LOG_DIR = os.getenv("LOG_DIR", "logs")

ENABLE_AUTOFIX_ENDPOINT = os.getenv("ENABLE_AUTOFIX_ENDPOINT", "false").lower() == "true"
