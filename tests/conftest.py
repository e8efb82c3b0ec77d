import pytest

from skillpack.skills import price_drop_monitor


@pytest.fixture(autouse=True)
def clear_price_alerts():
    price_drop_monitor._clear_alerts()
    yield
    price_drop_monitor._clear_alerts()
