import logging

from medlist.core.server_config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

def setup_logging(level: str | None = None) -> None:
    """Configure root logging once for the service process."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
    # the HTTP client libraries are chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("huggingface_hub").setLevel(logging.WARNING)
