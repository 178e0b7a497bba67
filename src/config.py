"""
Runtime configuration, read from environment variables at import time.

    PRODUCT_IMAGE_DIR            directory holding the product images
    PRODUCT_IMAGE_PUBLIC_PREFIX  URL prefix the images are served under
    IMAGE_MATCHER_LOG_LEVEL      DEBUG / INFO / WARNING / ERROR
    IMAGE_MATCHER_USE_KIWI       1 / true / yes to enable the Kiwi analyzer stage
"""

import logging
import os

PRODUCT_IMAGE_DIR = os.environ.get(
    'PRODUCT_IMAGE_DIR', os.path.join('.', 'public', 'productsPage'))
PRODUCT_IMAGE_PUBLIC_PREFIX = os.environ.get('PRODUCT_IMAGE_PUBLIC_PREFIX', '/productsPage')
LOG_LEVEL = os.environ.get('IMAGE_MATCHER_LOG_LEVEL', 'WARNING').upper()
USE_KIWI = os.environ.get('IMAGE_MATCHER_USE_KIWI', '').strip().lower() in ('1', 'true', 'yes', 'on')

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def configure_logging(level: str = None) -> None:
    """Set up root logging once; ``level`` overrides IMAGE_MATCHER_LOG_LEVEL."""
    name = (level or LOG_LEVEL).upper()
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)
