import io
import logging

import pytest

from .store.memory import MemoryBackend, MemoryVersionStore


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("semverstore")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream  # Yield the stream to the test function

    # Cleanup after the test
    logger.removeHandler(handler)
    log_stream.close()


@pytest.fixture
def memory_backend():
    return MemoryBackend()


@pytest.fixture
def memory_store(memory_backend):
    """An in-memory, generation-numbered store."""
    return MemoryVersionStore(memory_backend, max_retries=12)
