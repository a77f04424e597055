"""
Ports the services depend on instead of concrete backends.
Upload storage is the only one so far: local disk in development and tests.
"""

from .storage import StorageBackend

__all__ = ['StorageBackend']
