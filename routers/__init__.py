"""
API routers.
Services are read from app.state, see routers/dependencies.py.
"""

from routers import faces, people

__all__ = ["faces", "people"]
