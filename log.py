import logging

from settings import LOG_LEVEL

_configured = False


def get_logger(name):
    global _configured
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        root = logging.getLogger("inventory")
        root.addHandler(handler)
        root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
        _configured = True
    return logging.getLogger(f"inventory.{name}")
