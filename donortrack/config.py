"""
DonorTrack - Configuration
Constants, storage keys and server defaults. Environment variables
prefixed with DONORTRACK_ override the server values.
"""

import os

# ============== PATHS ==============

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_DIR = os.environ.get('DONORTRACK_DATA_DIR', os.path.join(PROJECT_ROOT, 'data'))

# ============== STORAGE KEYS ==============

STORAGE_KEY = 'blood_donor_app_v1'
SETTINGS_KEY = 'blood_donor_settings_v1'

# ============== ELIGIBILITY ==============

DEFAULT_INTERVAL_DAYS = 90
MAX_INTERVAL_DAYS = 3650    # ten years; larger values fall back to the default
SOON_WINDOW_DAYS = 14       # "eligible soon" upper bound, inclusive
UPCOMING_WINDOW_DAYS = 7    # dashboard "upcoming" counter

# ============== IMPORT DEFAULTS ==============

UNKNOWN_NAME = 'Unknown'
DEFAULT_BLOOD_GROUP = 'O+'

# ============== SERVER ==============

HOST = os.environ.get('DONORTRACK_HOST', '127.0.0.1')
PORT = int(os.environ.get('DONORTRACK_PORT', '5000'))
DEBUG = os.environ.get('DONORTRACK_DEBUG', '').lower() in ('1', 'true', 'yes')
SECRET_KEY = os.environ.get('DONORTRACK_SECRET_KEY', 'donortrack-local-key')
