"""
Configuration for the FetchYourKeys client: settings and logging.
"""

from .settings import ClientSettings, load_settings, normalize_environment, DEV, PROD

__all__ = [
    'ClientSettings',
    'load_settings',
    'normalize_environment',
    'DEV',
    'PROD',
]
