# plugins/twitter/__init__.py
"""
Twitter Plugin Package
======================

This package provides "Sign in with Twitter" for the login service.

Strategies:
----------
- TwitterOAuthStrategy: OAuth 1.0a login against api.twitter.com

Routes:
------
- TwitterOAuthRoutes: the request phase and callback endpoints

Authentication Flow:
------------------
1. The user agent requests /auth/twitter (optionally with force_login,
   use_authorize, lang, screen_name, x_auth_access_type, callback_url, origin)
2. The strategy obtains a request token and redirects to
   https://api.twitter.com/oauth/authenticate (or /oauth/authorize)
3. Twitter redirects back to /auth/twitter/callback with oauth_verifier
4. The strategy exchanges it for an access token, fetches the profile and
   stores the auth hash in the session

Both plugins are registered with the plugin system when this package is
imported.
"""

# Import Strategies
from .auth import TwitterOAuthStrategy

# Import Routes
from .routes import TwitterOAuthRoutes

# Register plugins
from plugins import register_strategy_plugin, register_route_plugin

# Automatically register the plugins when this package is imported
register_strategy_plugin(TwitterOAuthStrategy)
register_route_plugin(TwitterOAuthRoutes)
