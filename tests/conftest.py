import pytest

from tests.factories import make_pool


@pytest.fixture
def sol_usdc_pool():
    return make_pool()
