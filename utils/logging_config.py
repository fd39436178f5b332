import logging

from utils.app_config import get_log_level

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once at startup."""
    name = (level or get_log_level()).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    # matplotlib is chatty at DEBUG
    logging.getLogger("matplotlib").setLevel(max(numeric, logging.WARNING))
