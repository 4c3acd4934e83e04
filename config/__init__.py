"""
Configuration module for the Midnight Tracker booking sync.
"""

from .settings import gmail_config, calendar_config, firebase_config, sync_config

__all__ = ['gmail_config', 'calendar_config', 'firebase_config', 'sync_config']
