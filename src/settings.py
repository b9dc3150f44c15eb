"""
Application settings management.
Uses python-dotenv to load environment variables from .env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from project root
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

# Store original environment values to prevent modification
_ENV_CACHE = {}


def get_setting(key: str, default=None):
    """
    Get a setting from environment variables.

    Returns a copy of the value to prevent accidental modification
    of the cached value.

    Args:
        key: Environment variable name
        default: Default value if not found

    Returns:
        The environment variable value or default

    Example:
        >>> SMTP_HOST = get_setting('SMTP_HOST', '')
        >>> SMTP_PORT = int(get_setting('SMTP_PORT', '587'))
    """
    # Use cached value if available, otherwise get from env
    if key not in _ENV_CACHE:
        _ENV_CACHE[key] = os.getenv(key, default)

    value = _ENV_CACHE[key]

    # For mutable types, return a copy
    if isinstance(value, (list, dict)):
        return value.copy()

    return value


# SMTP settings. Leave SMTP_HOST empty to disable email sending
SMTP_HOST = get_setting('SMTP_HOST', '')
SMTP_PORT = int(get_setting('SMTP_PORT', '587'))
SMTP_FROM = get_setting('SMTP_FROM', '')
SMTP_USER = get_setting('SMTP_USER', '')
SMTP_PASSWORD = get_setting('SMTP_PASSWORD', '')
# 0 Plain, 1 Login, 2 CRAM-MD5
SMTP_AUTH_TYPE = int(get_setting('SMTP_AUTH_TYPE', '0'))
# 0 no encryption, 1 TLS, 2 STARTTLS
SMTP_ENCRYPTION = int(get_setting('SMTP_ENCRYPTION', '0'))
SMTP_DOMAIN = get_setting('SMTP_DOMAIN', '')
SMTP_TEMPLATES_PATH = get_setting('SMTP_TEMPLATES_PATH', 'templates')

# Base directory for relative paths (templates)
CONFIG_DIR = get_setting('CONFIG_DIR', '.')
# Additional directories searched for relative templates paths
SHARED_DATA_DIRS = [d for d in get_setting('SHARED_DATA_DIRS', '').split(os.pathsep) if d]

# Logging
LOG_LEVEL = get_setting('LOG_LEVEL', 'INFO').upper()
DEBUG = get_setting('DEBUG', 'False').lower() in ('true', '1', 'yes')
