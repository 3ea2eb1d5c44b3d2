import os
import sys

import pytest

# Ensure the package is importable without installation
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hyperlink.logging_config import correlation_id_var


# Each test starts without a correlation id
@pytest.fixture(autouse=True)
def _reset_correlation_id():
    token = correlation_id_var.set('')
    yield
    correlation_id_var.reset(token)
