import logging
import os

LOG_LEVEL = os.getenv("EVIDENCE_LOG_LEVEL", os.getenv("LOG_LEVEL", "INFO")).upper()
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Devuelve un logger configurado. Inicializa basicConfig una sola vez.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL)
    return logger
