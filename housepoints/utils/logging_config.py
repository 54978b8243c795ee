"""
Logging setup for House Points.

Call setup_logging() once, before the app is created. Modules then use
logging.getLogger(__name__) (or current_app.logger inside requests).
"""
import logging
import os
import sys

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

_configured = False


def setup_logging(level: str = None) -> None:
    """Install a single stdout handler on the root logger."""
    global _configured
    if _configured:
        return

    level_name = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))
    root.addHandler(handler)

    # SQL echo is too noisy outside of query debugging
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    _configured = True
