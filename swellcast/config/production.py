"""
Deployment configuration.

Settings come from environment variables so the same code runs locally,
under a WSGI host and in tests.
"""

import os

# Running environment
SWELLCAST_ENV = os.environ.get('SWELLCAST_ENV', 'development')
is_production = SWELLCAST_ENV == 'production'

# Project root is two levels above this package (repo checkout)
PROJECT_ROOT = os.environ.get(
    'SWELLCAST_ROOT',
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
)

# Data directories
DATA_DIR = os.environ.get('SWELLCAST_DATA_DIR', os.path.join(PROJECT_ROOT, 'data'))
RATINGS_DIR = os.path.join(DATA_DIR, 'ratings')
LOGS_DIR = os.environ.get('SWELLCAST_LOGS_DIR', os.path.join(PROJECT_ROOT, 'logs'))

# CORS settings
ALLOWED_ORIGINS = os.environ.get('ALLOWED_ORIGINS', '*').split(',')

# Logging configuration
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
LOG_FILE = os.path.join(LOGS_DIR, 'app.log')
LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'

# Flask configuration
DEBUG = not is_production

