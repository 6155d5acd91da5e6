"""
Integration tests for the Twitter login routes
"""

import base64
import json

import pytest
from urllib.parse import parse_qs, urlsplit

import tweepy

from config import get_settings

pytestmark = [pytest.mark.integration, pytest.mark.routes]


def start_login(client, **params):
    response = client.get("/auth/twitter", params=params)
    assert response.status_code == 307
    return response


def read_session_cookie(client):
    """Decode the signed, base64 encoded JSON session cookie"""
    cookie = client.cookies.get(get_settings().SESSION_COOKIE_NAME)
    assert cookie
    payload = cookie.strip('"').split(".")[0]
    return json.loads(base64.b64decode(payload))


class TestTwitterRequestPhase:
    """Test GET /auth/twitter"""

    def test_redirects_to_authenticate(self, client, fake_tweepy):
        """Test the login redirects to Twitter's authenticate endpoint"""
        response = start_login(client)

        location = urlsplit(response.headers["location"])
        assert location.scheme == "https"
        assert location.netloc == "api.twitter.com"
        assert location.path == "/oauth/authenticate"
        assert parse_qs(location.query)["oauth_token"] == ["test-request-token"]

    def test_use_authorize(self, client, fake_tweepy):
        """Test use_authorize redirects to the authorize endpoint"""
        response = start_login(client, use_authorize="true")
        assert urlsplit(response.headers["location"]).path == "/oauth/authorize"

    def test_force_login(self, client, fake_tweepy):
        """Test force_login is forwarded to Twitter"""
        response = start_login(client, force_login="true")
        query = parse_qs(urlsplit(response.headers["location"]).query)
        assert query["force_login"] == ["true"]

    def test_default_callback_url(self, client, fake_tweepy):
        """Test the callback URL defaults to the callback route of this app"""
        start_login(client)
        handler = fake_tweepy.handler.instances[-1]
        assert handler.callback == "http://testserver/auth/twitter/callback"

    def test_callback_url_param(self, client, fake_tweepy):
        """Test a callback_url query parameter is sent to Twitter verbatim"""
        start_login(client, callback_url="http://foo.dev/auth/twitter/foobar")
        handler = fake_tweepy.handler.instances[-1]
        assert handler.callback == "http://foo.dev/auth/twitter/foobar"

    def test_x_auth_access_type(self, client, fake_tweepy):
        """Test x_auth_access_type reaches the request token call"""
        start_login(client, x_auth_access_type="read")
        handler = fake_tweepy.handler.instances[-1]
        assert handler.authorization_calls[-1]["access_type"] == "read"

    def test_request_token_failure(self, client, fake_tweepy):
        """Test a request token error redirects to the failure page"""
        fake_tweepy.handler.request_token_error = tweepy.TweepyException("boom")

        response = client.get("/auth/twitter")

        assert response.status_code == 303
        assert response.headers["location"] == "/auth/failure?message=request_token_failed&strategy=twitter"


class TestTwitterFormRequestPhase:
    """Test POST /auth/twitter"""

    def test_form_starts_login(self, client, fake_tweepy):
        """Test a submitted form starts the login with its fields"""
        response = client.post("/auth/twitter", data={"force_login": "true", "lang": "fr"})

        assert response.status_code == 303
        location = urlsplit(response.headers["location"])
        assert location.path == "/oauth/authenticate"
        query = parse_qs(location.query)
        assert query["force_login"] == ["true"]
        assert query["lang"] == ["fr"]

    def test_form_overrides_query(self, client, fake_tweepy):
        """Test form fields win over query parameters of the same name"""
        response = client.post("/auth/twitter?lang=en&screen_name=foo", data={"lang": "fr"})

        query = parse_qs(urlsplit(response.headers["location"]).query)
        assert query["lang"] == ["fr"]
        assert query["screen_name"] == ["foo"]

    def test_form_origin_used_after_callback(self, client, fake_tweepy):
        """Test an origin posted with the form is the final redirect target"""
        client.post("/auth/twitter", data={"origin": "/welcome"})

        response = client.get("/auth/twitter/callback", params={"oauth_verifier": "test-verifier"})

        assert response.headers["location"] == "/welcome"


class TestTwitterCallbackPhase:
    """Test GET /auth/twitter/callback"""

    def test_full_login(self, client, fake_tweepy):
        """Test a complete login stores the identity in the session"""
        start_login(client, origin="/welcome")

        response = client.get(
            "/auth/twitter/callback",
            params={"oauth_token": "test-request-token", "oauth_verifier": "test-verifier"}
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/welcome"

        me = client.get("/").json()
        assert me["authenticated"] is True
        assert me["provider"] == "twitter"
        assert me["uid"] == "1234"
        assert me["info"]["nickname"] == "foo"
        assert me["info"]["urls"]["Twitter"] == "https://twitter.com/foo"

    def test_session_cookie_holds_no_credentials(self, client, fake_tweepy):
        """Test the access token and secret never reach the session cookie"""
        start_login(client)
        client.get("/auth/twitter/callback", params={"oauth_verifier": "test-verifier"})

        session = read_session_cookie(client)

        assert set(session["auth"]) == {"provider", "uid", "info"}
        raw = json.dumps(session)
        assert "test-access-token" not in raw
        assert "test-access-secret" not in raw
        assert "auth.oauth.twitter" not in session

    def test_redirects_to_login_redirect_url_without_origin(self, client, fake_tweepy):
        """Test LOGIN_REDIRECT_URL is used without an origin"""
        start_login(client)
        response = client.get("/auth/twitter/callback", params={"oauth_verifier": "test-verifier"})

        assert response.status_code == 303
        assert response.headers["location"] == "/"

    def test_ignores_external_origin(self, client, fake_tweepy):
        """Test an off-site origin is not used as redirect target"""
        start_login(client, origin="//evil.example/steal")
        response = client.get("/auth/twitter/callback", params={"oauth_verifier": "test-verifier"})

        assert response.headers["location"] == "/"

    def test_without_request_phase(self, client, fake_tweepy):
        """Test a callback without request phase fails with session_expired"""
        response = client.get("/auth/twitter/callback", params={"oauth_verifier": "test-verifier"})

        assert response.status_code == 303
        assert response.headers["location"] == "/auth/failure?message=session_expired&strategy=twitter"

        failure = client.get(response.headers["location"])
        assert failure.status_code == 401
        assert failure.json() == {"error": "session_expired", "strategy": "twitter"}

    def test_denied(self, client, fake_tweepy):
        """Test a denied authorization leaves the user logged out"""
        start_login(client)
        response = client.get("/auth/twitter/callback", params={"denied": "test-request-token"})

        assert response.headers["location"] == "/auth/failure?message=user_denied&strategy=twitter"
        assert client.get("/").json() == {"authenticated": False}

    def test_access_token_failure(self, client, fake_tweepy):
        """Test an access token error redirects with invalid_credentials"""
        fake_tweepy.handler.access_token_error = tweepy.TweepyException("Token error")
        start_login(client)

        response = client.get("/auth/twitter/callback", params={"oauth_verifier": "test-verifier"})

        assert response.headers["location"] == "/auth/failure?message=invalid_credentials&strategy=twitter"

    def test_logout(self, client, fake_tweepy):
        """Test logout clears the login"""
        start_login(client)
        client.get("/auth/twitter/callback", params={"oauth_verifier": "test-verifier"})
        assert client.get("/").json()["authenticated"] is True

        client.get("/auth/logout")

        assert client.get("/").json() == {"authenticated": False}
