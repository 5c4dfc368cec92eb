import os
import sys

import pytest

# Ensure the app package is importable without installation
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import main


# Fresh stores, clock and rate limiter before each test for isolation
@pytest.fixture(autouse=True)
def _reset_state():
    main.reset_state()
    yield
