# plugins/twitter/auth/__init__.py
"""
Twitter Login Strategy
======================

This package contains the Twitter OAuth 1.0a login strategy:

- options: option models with the fixed Twitter endpoints
- handler: tweepy OAuth 1.0a handler resolving endpoints from the options
- identity: mapping of the raw Twitter profile to the normalized identity
- oauth: the TwitterOAuthStrategy plugin driving the two login phases
"""

from .handler import TwitterOAuthHandler
from .identity import extra_info, image_url, normalize_identity, profile_url
from .options import (
    AuthorizeParams,
    ClientOptions,
    RequestParams,
    TwitterStrategyOptions,
    AUTHENTICATE_PATH,
    AUTHORIZE_PATH,
    TWITTER_SITE,
)
from .oauth import TwitterOAuthStrategy, PARAMS_SESSION_KEY, REQUEST_TOKEN_SESSION_KEY

__all__ = [
    "TwitterOAuthStrategy", "TwitterOAuthHandler", "TwitterStrategyOptions",
    "AuthorizeParams", "ClientOptions", "RequestParams",
    "normalize_identity", "extra_info", "image_url", "profile_url",
    "AUTHENTICATE_PATH", "AUTHORIZE_PATH", "TWITTER_SITE",
    "PARAMS_SESSION_KEY", "REQUEST_TOKEN_SESSION_KEY",
]
