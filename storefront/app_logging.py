import logging
from pythonjsonlogger import jsonlogger

_HANDLER_NAME = 'storefront'


def setup_logger(level: int = logging.INFO, json: bool = True) -> None:
    """Attach a (JSON) stream handler to the root logger, once."""
    logger = logging.getLogger()
    if any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        logger.setLevel(level)
        return
    logHandler = logging.StreamHandler()
    logHandler.set_name(_HANDLER_NAME)
    if json:
        formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s',
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s: %(message)s'
        )
    logHandler.setFormatter(formatter)
    logger.addHandler(logHandler)
    logger.setLevel(level)
