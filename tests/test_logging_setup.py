import logging

import pytest

from carwash_crm.logging_setup import LIBRARY_LOGGERS, setup_logging


@pytest.fixture(autouse=True)
def restore_library_levels():
    levels = {name: logging.getLogger(name).level for name in LIBRARY_LOGGERS}
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def test_library_loggers_quiet_by_default():
    setup_logging("INFO")

    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    assert logging.getLogger("uvicorn.access").level == logging.WARNING


def test_debug_lets_library_loggers_through():
    setup_logging("DEBUG", debug=True)

    assert logging.getLogger("sqlalchemy.engine").level == logging.NOTSET
