# plugins/twitter/auth/oauth.py
"""
Twitter OAuth Login Strategy
============================

This module implements "Sign in with Twitter" on top of the OAuth 1.0a flow.

The TwitterOAuthStrategy class implements the StrategyPlugin interface,
providing:
- Selection of the authorize endpoint (/oauth/authenticate or /oauth/authorize)
- Resolution of the callback URL and callback path
- Request token acquisition and the redirect URL to Twitter
- Access token exchange when Twitter redirects back
- Mapping of the Twitter profile to the normalized identity

The handshake itself (request token, access token, request signing) is done
by tweepy. The strategy only decides what to ask for and keeps the request
token in the session between the two phases.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import tweepy

from plugins import AuthenticationFailure, RequestContext, StrategyPlugin
from plugins.twitter.config import get_twitter_settings
from .handler import TwitterOAuthHandler
from .identity import extra_info, image_url, normalize_identity
from .options import AUTHENTICATE_PATH, AUTHORIZE_PATH, TwitterStrategyOptions

# Set up logging
logger = logging.getLogger(__name__)

# Session keys shared between the request and callback phases
PARAMS_SESSION_KEY = "auth.params"
REQUEST_TOKEN_SESSION_KEY = "auth.oauth.twitter"

# Profile fields requested from GET /2/users/me
PROFILE_FIELDS = ["description", "location", "url", "profile_image_url"]
# Only returned to apps with the email permission
EMAIL_FIELD = "confirmed_email"

_TRUE_STRINGS = ("1", "true", "yes", "on")


def _is_truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_STRINGS


class TwitterOAuthStrategy(StrategyPlugin):
    """
    Strategy for Twitter OAuth 1.0a login.

    One instance handles one phase of one login attempt. Options are copied
    per instance, so the mutations made by request_phase() never leak into
    other requests.

    Class Attributes:
        service_name (str): The unique identifier for this plugin
        options_class (Type[TwitterStrategyOptions]): The options model
    """

    service_name = "twitter"
    options_class = TwitterStrategyOptions

    def __init__(
        self,
        context: RequestContext,
        oauth_handler_factory: Optional[Callable[..., tweepy.OAuth1UserHandler]] = None,
        client_factory: Optional[Callable[..., tweepy.Client]] = None,
        **overrides: Any
    ):
        """
        Initialize the strategy.

        Args:
            context (RequestContext): Params, session and callback URL source
            oauth_handler_factory: Builds the OAuth 1.0a handler, defaults to
                TwitterOAuthHandler
            client_factory: Builds the API client used to fetch the profile,
                defaults to tweepy.Client
            **overrides: Option values merged over the defaults
        """
        super().__init__(context, **overrides)
        self.oauth_handler_factory = oauth_handler_factory or TwitterOAuthHandler
        self.client_factory = client_factory or tweepy.Client
        self.access_token: Optional[Tuple[str, str]] = None
        self._raw_info: Optional[Dict[str, Any]] = None

        if not self.options.client_id or not self.options.client_secret:
            logger.warning("Twitter strategy initialized without consumer keys")

    @classmethod
    def default_options(cls) -> Dict[str, Any]:
        settings = get_twitter_settings()
        return {
            "name": cls.service_name,
            "client_id": settings.CONSUMER_KEY or None,
            "client_secret": settings.CONSUMER_SECRET or None,
            "use_authorize": settings.USE_AUTHORIZE,
            "skip_info": settings.SKIP_INFO,
            "image_size": settings.IMAGE_SIZE,
            "secure_image_url": settings.SECURE_IMAGE_URL,
            "include_email": settings.INCLUDE_EMAIL,
        }

    def get_oauth_handler(self, callback_url: Optional[str] = None) -> tweepy.OAuth1UserHandler:
        """
        Get a Twitter OAuth handler instance.

        The handler resolves the request token, authorize and access token
        URLs from options.client_options.

        Args:
            callback_url (Optional[str]): Callback URL for the OAuth flow

        Returns:
            tweepy.OAuth1UserHandler: Configured OAuth handler
        """
        return self.oauth_handler_factory(
            self.options.client_id,
            self.options.client_secret,
            callback=callback_url,
            client_options=self.options.client_options
        )

    def authorize_endpoint(self) -> str:
        """
        Select the authorize path and store it in the client options.

        /oauth/authorize makes Twitter ask for permission on every login,
        /oauth/authenticate lets an already authorized user straight through.

        Returns:
            str: The selected authorize path
        """
        params = self.context.fetch_params()
        if self.options.use_authorize or _is_truthy(params.get("use_authorize")):
            path = AUTHORIZE_PATH
        else:
            path = AUTHENTICATE_PATH
        self.options.client_options.authorize_path = path
        return path

    def request_phase(self) -> str:
        """
        Start the Twitter login.

        Copies the supported request parameters into the options, obtains a
        request token and returns the Twitter URL to redirect to. The request
        token and the request parameters are kept in the session for the
        callback phase.

        Returns:
            str: The Twitter authorize URL

        Raises:
            AuthenticationFailure: If no request token could be obtained
        """
        params = self.context.fetch_params()
        session = self.context.fetch_session()
        session[PARAMS_SESSION_KEY] = dict(params)

        if _is_truthy(params.get("force_login")):
            self.options.authorize_params.force_login = True
        for key in ("lang", "screen_name"):
            if params.get(key):
                setattr(self.options.authorize_params, key, params[key])
        if params.get("x_auth_access_type"):
            self.options.request_params.x_auth_access_type = params["x_auth_access_type"]

        authorize_path = self.authorize_endpoint()
        callback_url = self.callback_url()
        logger.info(f"Starting Twitter login via {authorize_path}, callback {callback_url}")

        auth = self.get_oauth_handler(callback_url)
        try:
            redirect_url = auth.get_authorization_url(
                signin_with_twitter=authorize_path == AUTHENTICATE_PATH,
                access_type=self.options.request_params.x_auth_access_type
            )
        except tweepy.TweepyException as e:
            logger.error(f"Error getting Twitter request token: {str(e)}")
            raise AuthenticationFailure(
                "request_token_failed", f"Failed to get Twitter request token: {str(e)}"
            ) from e

        session[REQUEST_TOKEN_SESSION_KEY] = dict(auth.request_token)
        return self.authorize_url(redirect_url)

    def authorize_url(self, redirect_url: str) -> str:
        """
        Append every authorize param that is set to the handler's authorize URL.

        Parameters already present in the URL, such as oauth_token, are kept.
        """
        parts = urlsplit(redirect_url)
        query = parse_qsl(parts.query, keep_blank_values=True)
        present = {key for key, _ in query}
        for key, value in self.options.authorize_params.model_dump(exclude_none=True).items():
            if key in present:
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            query.append((key, str(value)))
        return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))

    def callback_url(self) -> str:
        """
        Resolve the callback URL.

        A callback_url request parameter wins and is returned verbatim,
        otherwise the host's default callback URL is used.
        """
        params = self.context.fetch_params()
        if params.get("callback_url"):
            return params["callback_url"]
        return super().callback_url()

    def callback_path(self) -> str:
        """
        Get the callback path.

        When the request phase was given a callback_url, its path is the
        callback path, otherwise the default "/auth/twitter/callback" applies.
        """
        recorded: Mapping[str, Any] = self.context.fetch_session().get(PARAMS_SESSION_KEY) or {}
        callback_url = recorded.get("callback_url")
        if not callback_url:
            return super().callback_path()
        return urlsplit(callback_url).path

    def callback_phase(self) -> Dict[str, Any]:
        """
        Complete the Twitter login after Twitter redirects back.

        Returns:
            Dict[str, Any]: The auth hash

        Raises:
            AuthenticationFailure: If the user denied access, the session lost
                the request token, or the token exchange failed
        """
        params = self.context.fetch_params()
        session = self.context.fetch_session()
        request_token = session.pop(REQUEST_TOKEN_SESSION_KEY, None)

        if params.get("denied"):
            logger.info("Twitter login denied by user")
            raise AuthenticationFailure("user_denied", "User denied the Twitter authorization")
        if not request_token:
            raise AuthenticationFailure("session_expired", "No Twitter request token in session")

        oauth_verifier = params.get("oauth_verifier")
        if not oauth_verifier:
            raise AuthenticationFailure("invalid_request", "Missing oauth_verifier")
        oauth_token = params.get("oauth_token")
        if oauth_token and oauth_token != request_token.get("oauth_token"):
            raise AuthenticationFailure("invalid_request", "OAuth token does not match the request token")

        auth = self.get_oauth_handler()
        auth.request_token = request_token
        try:
            self.access_token = auth.get_access_token(oauth_verifier)
        except tweepy.TweepyException as e:
            logger.error(f"Twitter OAuth error: {str(e)}")
            raise AuthenticationFailure(
                "invalid_credentials", f"Failed to complete Twitter OAuth: {str(e)}"
            ) from e

        auth_hash = self.auth_hash()
        logger.info(f"Twitter login completed for user {auth_hash['uid']}")
        return auth_hash

    def profile_fields(self) -> List[str]:
        if self.options.include_email:
            return PROFILE_FIELDS + [EMAIL_FIELD]
        return list(PROFILE_FIELDS)

    def raw_info(self) -> Dict[str, Any]:
        """
        Get the raw Twitter profile of the authenticated user.

        Fetched once per strategy instance with the access token obtained in
        the callback phase. With include_email the confirmed email address is
        requested too and reported as "email".

        Returns:
            Dict[str, Any]: Profile fields as returned by Twitter

        Raises:
            AuthenticationFailure: If the profile cannot be retrieved
        """
        if self._raw_info is None:
            access_token, access_token_secret = self.access_token or (None, None)
            client = self.client_factory(
                consumer_key=self.options.client_id,
                consumer_secret=self.options.client_secret,
                access_token=access_token,
                access_token_secret=access_token_secret
            )
            try:
                response = client.get_me(user_auth=True, user_fields=self.profile_fields())
            except tweepy.TweepyException as e:
                logger.error(f"Error getting Twitter user info: {str(e)}")
                raise AuthenticationFailure(
                    "invalid_credentials", f"Failed to get Twitter user info: {str(e)}"
                ) from e
            user = response.data
            raw_info = dict(user.data) if user is not None else {}
            if EMAIL_FIELD in raw_info and "email" not in raw_info:
                raw_info["email"] = raw_info[EMAIL_FIELD]
            self._raw_info = raw_info
        return self._raw_info

    def uid(self) -> Optional[str]:
        return self.raw_info().get("id")

    def info(self) -> Dict[str, Any]:
        raw_info = self.raw_info()
        identity = normalize_identity(raw_info)
        identity["image"] = image_url(raw_info, self.options.image_size, self.options.secure_image_url)
        return identity

    def credentials(self) -> Dict[str, Any]:
        access_token, access_token_secret = self.access_token or (None, None)
        return {"token": access_token, "secret": access_token_secret}

    def extra(self) -> Dict[str, Any]:
        return extra_info(self.raw_info(), self.skip_info())
