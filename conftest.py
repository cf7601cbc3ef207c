import logging

import pytest


@pytest.fixture(autouse=True)
def _enable_logging():
    # settings.py disables logging under test; assertLogs needs it on
    previous = logging.root.manager.disable
    logging.disable(logging.NOTSET)
    yield
    logging.disable(previous)
