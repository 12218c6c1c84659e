import logging

from sfrest.logging_config import configure_logging


def test_configure_logging_levels(caplog):
    # None: keep default WARNING
    configure_logging(None)
    logger = logging.getLogger("sfrest.test")
    logger.warning("warn")
    assert any("warn" in rec.message for rec in caplog.records)

    caplog.clear()
    configure_logging(logging.INFO)
    logger.info("info-ok")
    assert any("info-ok" in rec.message for rec in caplog.records)

    caplog.clear()
    configure_logging(logging.DEBUG)
    logger.debug("dbg")
    assert any("dbg" in rec.message for rec in caplog.records)


def test_urllib3_connection_logger_quieted():
    configure_logging(logging.DEBUG)
    assert logging.getLogger("urllib3.connection").level == logging.ERROR
