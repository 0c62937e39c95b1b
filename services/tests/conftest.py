"""
Top-level test configuration for groupaccess.
"""

import os

# Ensure test-friendly defaults
os.environ.setdefault("GROUPACCESS_STORE__BACKEND", "memory")
os.environ.setdefault("GROUPACCESS_JSON_LOGS", "false")
os.environ.setdefault("GROUPACCESS_LOG_LEVEL", "DEBUG")
os.environ.setdefault("GROUPACCESS_CONFIG_FILE", "/nonexistent/groupaccess-test-config.yaml")
