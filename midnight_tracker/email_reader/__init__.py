"""
IMAP access to travel confirmation folders.
"""

from .gmail_client import GmailClient

__all__ = ['GmailClient']
