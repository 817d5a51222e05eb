"""
asgi.py -- ASGI entry point for the Chop account service.

Run with:  uvicorn asgi:app --reload

Kept separate from api/main.py so process managers have a stable import
path that does not move if the api/ package is reorganised.
"""

from api.main import app

__all__ = ["app"]
