"""Root conftest — shared test configuration."""

import os

# Human-readable logs in test output; never pick up a developer's .env port
os.environ.setdefault("ECHO_LOG_FORMAT", "text")
os.environ.setdefault("ECHO_PORT", "0")
