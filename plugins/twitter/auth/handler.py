# plugins/twitter/auth/handler.py
"""
OAuth 1.0a handler bound to the strategy's client options.

tweepy.OAuth1UserHandler always talks to https://api.twitter.com/oauth/.
TwitterOAuthHandler resolves every OAuth endpoint from ClientOptions instead,
so the request token, the authorize redirect and the access token exchange
all go to the same configured site.
"""

from typing import Optional

import tweepy

from .options import ClientOptions


class TwitterOAuthHandler(tweepy.OAuth1UserHandler):
    """tweepy.OAuth1UserHandler with configurable endpoint URLs."""

    def __init__(self, consumer_key, consumer_secret, access_token=None,
                 access_token_secret=None, callback=None,
                 client_options: Optional[ClientOptions] = None):
        super().__init__(
            consumer_key,
            consumer_secret,
            access_token=access_token,
            access_token_secret=access_token_secret,
            callback=callback
        )
        self.client_options = client_options or ClientOptions()

    def _get_oauth_url(self, endpoint):
        paths = {
            "request_token": self.client_options.request_token_path,
            "access_token": self.client_options.access_token_path,
            # authorize_endpoint() has already stored the selected path
            "authenticate": self.client_options.authorize_path,
            "authorize": self.client_options.authorize_path,
        }
        path = paths.get(endpoint, f"/oauth/{endpoint}")
        return self.client_options.site.rstrip("/") + path
