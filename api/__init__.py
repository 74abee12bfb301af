"""
HTTP surface of the relay.

This package provides the FastAPI application:
- One POST route per frontend event, plus the payment routes
- CORS restricted to the frontend origins
- Error handlers that turn every failure into {success: false, message}

The served instance is api.main:app, built on first access.
"""

from api.main import create_app

__all__ = ["create_app"]
