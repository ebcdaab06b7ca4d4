"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.importer import router as importer_router

__all__ = [
    "importer_router",
]
