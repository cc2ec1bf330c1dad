import pytest

from roadtrip_routing.state import state


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_state():
    """Each test starts with an empty session."""
    state.routes.clear()
    yield
    state.routes.clear()
