# couture_payments/config.py

import os
import logging
from decimal import Decimal

# --- Database Configuration ---
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__))) # project root
DATA_DIR = os.path.join(BASE_DIR, "data")
DB_NAME = "couture_payments.db"
DATABASE_PATH = os.environ.get("COUTURE_PAYMENTS_DB", os.path.join(DATA_DIR, DB_NAME))

# --- Logging Configuration ---
LOGS_DIR = os.path.join(BASE_DIR, "logs")
LOG_FILE_NAME = "app.log"
LOG_FILE_PATH = os.path.join(LOGS_DIR, LOG_FILE_NAME)

LOG_LEVEL = logging.DEBUG
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s'

LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': LOG_FORMAT,
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
            'level': logging.INFO,
        },
        'file': {
            'class': 'logging.handlers.RotatingFileHandler',
            'formatter': 'standard',
            'filename': LOG_FILE_PATH,
            'maxBytes': 1024*1024*5,  # 5 MB
            'backupCount': 5,
            'level': logging.INFO,
            'encoding': 'utf-8',
        },
    },
    'root': {
        'handlers': ['console', 'file'],
        'level': LOG_LEVEL,
    },
}

# --- Application Settings ---
DEFAULT_CURRENCY = "MAD" # displayed as "DH" by the storefront
MONEY_QUANTUM = Decimal("0.01")
UPCOMING_WINDOW_DAYS = 7 # pending orders starting within this many days count as upcoming
