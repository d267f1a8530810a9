"""
WSGI entry point.

WSGI hosts look for a variable named 'application' in this file.
"""

import sys
import os

# Add project directory to path
path = os.path.dirname(os.path.abspath(__file__))
if path not in sys.path:
    sys.path.insert(0, path)

# Import Flask app
from swellcast.api.server import app, main

application = app

# For local testing
if __name__ == '__main__':
    main()
