"""
Shared fixtures.
"""

import pytest

from bulkops.shopify import RateLimitedExecutor
from helpers import SleepRecorder


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def executor(sleeper) -> RateLimitedExecutor:
    return RateLimitedExecutor(sleep=sleeper, jitter=lambda: 0.0)
