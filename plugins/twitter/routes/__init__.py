# plugins/twitter/routes/__init__.py
"""
Twitter Routes
==============

This package provides the FastAPI routes that drive the Twitter login
strategy. They are mounted under "{AUTH_PATH_PREFIX}/twitter" by the main
application.
"""

from .oauth_routes import TwitterOAuthRoutes

__all__ = ['TwitterOAuthRoutes']
