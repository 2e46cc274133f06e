"""Unit test conftest for setting up test environment."""

import os

# Set environment before importing any remotesync modules so Settings picks it up
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOCAL_DEVELOPMENT", "true")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("SETTLE_DELAY_SECONDS", "1.0")
os.environ.setdefault("GITHUB_API_URL", "https://api.github.test")
os.environ.setdefault("GOOGLE_DRIVE_API_URL", "https://drive.test/drive/v3/files")
os.environ.setdefault("GOOGLE_DRIVE_UPLOAD_URL", "https://drive.test/upload/drive/v3/files")
