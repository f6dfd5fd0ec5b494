# HTTP API for PropLens

from .app import create_app

__all__ = ['create_app']
