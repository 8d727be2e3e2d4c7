import pytest

from helpers import StubDispatcher


@pytest.fixture
def stub_dispatcher():
    return StubDispatcher()
