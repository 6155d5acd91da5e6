# plugins/twitter/routes/oauth_routes.py
"""
Twitter OAuth Routes
====================

This module implements the HTTP routes for "Sign in with Twitter". It
defines the endpoints that a browser goes through during the OAuth 1.0a
login:

- GET|POST {prefix}/twitter: request phase, redirects to Twitter
- GET {prefix}/twitter/callback: callback phase, stores the identity in
  the session and redirects to the origin of the login

The session cookie is signed but not encrypted, so only provider, uid and
info are kept there. The access token and secret are handed to the
application's on_login hook and never reach the browser.

Failures in either phase redirect to {prefix}/failure with the failure
reason, which the main application renders.
"""

import logging
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse

from config import get_settings
from plugins import AuthenticationFailure, RoutePlugin, StarletteRequestContext, StrategyPlugin
from plugins.twitter.auth import PARAMS_SESSION_KEY

logger = logging.getLogger(__name__)

AUTH_SESSION_KEY = "auth"

# Auth hash keys that are safe to keep in the client-side session
SESSION_AUTH_KEYS = ("provider", "uid", "info")

LoginHook = Callable[[Request, Dict[str, Any]], None]


def safe_origin(origin: Optional[str]) -> Optional[str]:
    """Only allow local absolute paths as post-login redirect targets."""
    if not origin or not origin.startswith("/") or origin.startswith("//"):
        return None
    return origin


async def read_form(request: Request) -> Dict[str, Any]:
    """Dependency returning the submitted form fields."""
    form = await request.form()
    return dict(form)


class TwitterOAuthRoutes(RoutePlugin):
    """
    Plugin for Twitter OAuth routes.

    Every request gets a fresh TwitterOAuthStrategy built by the plugin
    manager from the registered "twitter" strategy.

    Class Attributes:
        service_name (str): The unique identifier for this plugin
    """

    service_name = "twitter"

    def __init__(self, on_login: Optional[LoginHook] = None, **strategy_options: Any):
        """
        Initialize the routes.

        Args:
            on_login (Optional[LoginHook]): Called with the request and the full
                auth hash, credentials included, after a successful login
            **strategy_options: Option overrides passed to every strategy
        """
        self.on_login = on_login
        self.strategy_options = strategy_options

    def create_strategy(self, request: Request, form: Optional[Dict[str, Any]] = None) -> StrategyPlugin:
        """
        Create the strategy for the current request.

        Raises:
            HTTPException: If no Twitter strategy is registered
        """
        from plugin_manager import plugin_manager

        settings = get_settings()
        options: Dict[str, Any] = {"path_prefix": settings.AUTH_PATH_PREFIX}
        options.update(self.strategy_options)

        strategy = plugin_manager.create_strategy(
            self.service_name, StarletteRequestContext(request, form), **options
        )
        if not strategy:
            raise HTTPException(
                status_code=500,
                detail="Twitter strategy not available"
            )
        return strategy

    def failure_redirect(self, reason: str) -> RedirectResponse:
        settings = get_settings()
        query = urlencode({"message": reason, "strategy": self.service_name})
        return RedirectResponse(f"{settings.AUTH_PATH_PREFIX}/failure?{query}", status_code=303)

    def get_router(self) -> APIRouter:
        """
        Get the router for Twitter OAuth routes.

        Returns:
            APIRouter: FastAPI router with the request and callback routes
        """
        router = APIRouter(tags=["twitter", "auth"])

        def start_login(request: Request, form: Optional[Dict[str, Any]] = None,
                        status_code: int = 307) -> RedirectResponse:
            strategy = self.create_strategy(request, form)
            try:
                redirect_url = strategy.request_phase()
            except AuthenticationFailure as e:
                logger.error(f"Twitter request phase failed: {e.reason}")
                return self.failure_redirect(e.reason)
            return RedirectResponse(redirect_url, status_code=status_code)

        @router.get("")
        def twitter_request_phase(request: Request):
            """
            Start the Twitter login.

            Query parameters understood by the strategy: force_login,
            use_authorize, lang, screen_name, x_auth_access_type,
            callback_url. origin is remembered for the final redirect.

            Returns:
                RedirectResponse: Redirect to Twitter's authorize page
            """
            return start_login(request)

        @router.post("")
        def twitter_request_phase_form(request: Request, form: Dict[str, Any] = Depends(read_form)):
            """
            Start the Twitter login from a submitted form.

            Form fields take precedence over query parameters of the same name.
            The redirect is a 303 so the browser continues to Twitter with GET.
            """
            return start_login(request, form, status_code=303)

        @router.get("/callback")
        def twitter_callback_phase(request: Request):
            """
            Handle the redirect back from Twitter.

            Returns:
                RedirectResponse: Redirect to the login origin, or to the
                failure page
            """
            strategy = self.create_strategy(request)
            try:
                auth_hash = strategy.callback_phase()
            except AuthenticationFailure as e:
                logger.warning(f"Twitter callback phase failed: {e.reason}")
                request.session.pop(PARAMS_SESSION_KEY, None)
                return self.failure_redirect(e.reason)

            recorded = request.session.pop(PARAMS_SESSION_KEY, None) or {}
            if self.on_login:
                self.on_login(request, auth_hash)
            request.session[AUTH_SESSION_KEY] = {key: auth_hash[key] for key in SESSION_AUTH_KEYS}

            next_url = safe_origin(recorded.get("origin")) or get_settings().LOGIN_REDIRECT_URL
            return RedirectResponse(next_url, status_code=303)

        return router
