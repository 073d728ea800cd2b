"""
API v1 package.

Contains versioned API routes for the registration flow display surface.
"""

from ticketflow.api.v1.routes import router

__all__ = ["router"]
