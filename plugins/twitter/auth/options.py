# plugins/twitter/auth/options.py
"""
Option models for the Twitter login strategy.

The defaults here are the fixed Twitter endpoints. Settings derived values
(consumer key and secret, use_authorize, skip_info, image options) are layered
on top by TwitterOAuthStrategy.default_options().
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from plugins import StrategyOptions

TWITTER_SITE = "https://api.twitter.com"
AUTHENTICATE_PATH = "/oauth/authenticate"
AUTHORIZE_PATH = "/oauth/authorize"
REQUEST_TOKEN_PATH = "/oauth/request_token"
ACCESS_TOKEN_PATH = "/oauth/access_token"

ImageSize = Literal["mini", "normal", "bigger", "original"]


class ClientOptions(BaseModel):
    model_config = ConfigDict(extra="allow", validate_assignment=True)

    site: str = TWITTER_SITE
    authorize_path: str = AUTHENTICATE_PATH
    request_token_path: str = REQUEST_TOKEN_PATH
    access_token_path: str = ACCESS_TOKEN_PATH


class AuthorizeParams(BaseModel):
    """Query parameters appended to the authorize URL."""
    model_config = ConfigDict(extra="allow", validate_assignment=True)

    force_login: Optional[bool] = None
    lang: Optional[str] = None
    screen_name: Optional[str] = None


class RequestParams(BaseModel):
    """Parameters sent with the request token call."""
    model_config = ConfigDict(extra="allow", validate_assignment=True)

    x_auth_access_type: Optional[str] = None


class TwitterStrategyOptions(StrategyOptions):
    name: str = "twitter"
    use_authorize: bool = False
    image_size: Optional[ImageSize] = None
    secure_image_url: bool = False
    include_email: bool = False
    authorize_params: AuthorizeParams = Field(default_factory=AuthorizeParams)
    request_params: RequestParams = Field(default_factory=RequestParams)
    client_options: ClientOptions = Field(default_factory=ClientOptions)
