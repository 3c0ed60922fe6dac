"""
Utility functions and helpers
"""
from .retry import retry_with_backoff

__all__ = ['retry_with_backoff']
