import logging

from ekubo_sdk.log import LOG_FORMAT, configure_logging


def test_configure_logging_writes_file(tmp_path) -> None:
    path = tmp_path / "logs" / "ekubo.log"
    logger = configure_logging(logging.DEBUG, log_path=path)
    try:
        logging.getLogger("ekubo_sdk.api.quote").info("hello from quote")
        for h in logger.handlers:
            h.flush()
        text = path.read_text(encoding="utf-8")
        assert "INFO hello from quote" in text
        assert LOG_FORMAT == "%(asctime)s %(levelname)s %(message)s"
    finally:
        for h in list(logger.handlers):
            if not isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
                h.close()


def test_configure_logging_replaces_handlers() -> None:
    logger = configure_logging()
    configure_logging()
    try:
        streams = [h for h in logger.handlers if type(h) is logging.StreamHandler]
        assert len(streams) == 1
    finally:
        for h in list(logger.handlers):
            if not isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
