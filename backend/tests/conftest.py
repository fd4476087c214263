import sys
from pathlib import Path

import pytest

# Add /backend to sys.path so "import order_mailer" works in tests
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))

from order_mailer.config import Settings  # noqa: E402


@pytest.fixture
def settings():
    return Settings(mailersend_api_key="mlsn.test-key", sender_email="admin@trial.mlsender.net")
