"""
Shared pytest fixtures and configuration
"""

import os
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

# Add the project root to Python path to make imports work
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables
os.environ["TWITTER_CONSUMER_KEY"] = "test_consumer_key"
os.environ["TWITTER_CONSUMER_SECRET"] = "test_consumer_secret"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOGIN_REDIRECT_URL"] = "/"

import tweepy

from plugins import StaticRequestContext
from plugins.twitter.auth import ClientOptions
from plugins.twitter.auth import oauth as twitter_oauth


RAW_INFO = {
    "id": "1234",
    "username": "foo",
    "name": "Foo Bar",
    "email": "foo@example.com",
    "location": "India",
    "description": "Developer",
    "url": "example.com/foobar",
    "profile_image_url": "https://pbs.twimg.com/profile_images/1/foo_normal.jpg",
}


class FakeOAuthHandler:
    """
    Stand-in for TwitterOAuthHandler.

    Records every handler built so tests can inspect the arguments.
    """

    instances: List["FakeOAuthHandler"] = []
    request_token_error: Optional[Exception] = None
    access_token_error: Optional[Exception] = None

    def __init__(self, consumer_key, consumer_secret, access_token=None,
                 access_token_secret=None, callback=None, client_options=None):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.callback = callback
        self.client_options = client_options or ClientOptions()
        self.request_token: Dict[str, Any] = {}
        self.authorization_calls: List[Dict[str, Any]] = []
        self.verifier = None
        FakeOAuthHandler.instances.append(self)

    def get_authorization_url(self, signin_with_twitter=False, access_type=None):
        self.authorization_calls.append(
            {"signin_with_twitter": signin_with_twitter, "access_type": access_type}
        )
        if self.request_token_error:
            raise self.request_token_error
        self.request_token = {
            "oauth_token": "test-request-token",
            "oauth_token_secret": "test-request-secret",
            "oauth_callback_confirmed": "true",
        }
        site = self.client_options.site.rstrip("/")
        return f"{site}{self.client_options.authorize_path}?oauth_token=test-request-token"

    def get_access_token(self, verifier=None):
        self.verifier = verifier
        if self.access_token_error:
            raise self.access_token_error
        return "test-access-token", "test-access-secret"


class FakeClient:
    """Stand-in for tweepy.Client answering get_me with RAW_INFO."""

    raw_info: Dict[str, Any] = RAW_INFO
    error: Optional[Exception] = None
    calls: List[Dict[str, Any]] = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs

    def get_me(self, **kwargs):
        FakeClient.calls.append({"init": self.kwargs, "get_me": kwargs})
        if self.error:
            raise self.error
        return SimpleNamespace(data=SimpleNamespace(data=dict(self.raw_info)))


@pytest.fixture(autouse=True)
def reset_fakes():
    """Give every test fresh fake collaborators."""
    FakeOAuthHandler.instances = []
    FakeOAuthHandler.request_token_error = None
    FakeOAuthHandler.access_token_error = None
    FakeClient.raw_info = RAW_INFO
    FakeClient.error = None
    FakeClient.calls = []
    yield


@pytest.fixture
def raw_info_hash() -> Dict[str, Any]:
    """A copy of the raw Twitter profile the fake client returns."""
    return dict(RAW_INFO)


@pytest.fixture
def context():
    """An empty in-memory request context."""
    return StaticRequestContext(base_url="http://example.org")


@pytest.fixture
def fake_tweepy(monkeypatch):
    """
    Replace the Twitter OAuth handler and tweepy's API client with the fakes.

    Strategies created without explicit factories pick these up.
    """
    monkeypatch.setattr(twitter_oauth, "TwitterOAuthHandler", FakeOAuthHandler)
    monkeypatch.setattr(tweepy, "Client", FakeClient)
    return SimpleNamespace(handler=FakeOAuthHandler, client=FakeClient)


@pytest.fixture(scope="function")
def app(fake_tweepy):
    """
    Create the FastAPI app for testing.
    """
    from main import app as main_app
    return main_app


@pytest.fixture(scope="function")
def client(app):
    """
    Create a test client for the FastAPI app.

    Redirects are not followed so tests can assert on the Twitter URL.
    """
    from fastapi.testclient import TestClient

    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
