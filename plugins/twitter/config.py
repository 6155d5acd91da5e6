# plugins/twitter/config.py
"""
Configuration for Twitter plugin
"""

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class TwitterSettings(BaseSettings):
    """
    Twitter-specific settings

    These settings can be configured via environment variables
    prefixed with TWITTER_, e.g., TWITTER_CONSUMER_KEY
    """
    # OAuth consumer credentials
    CONSUMER_KEY: str = ""
    CONSUMER_SECRET: str = ""

    # Strategy defaults
    USE_AUTHORIZE: bool = False
    SKIP_INFO: bool = False
    IMAGE_SIZE: Optional[str] = None
    SECURE_IMAGE_URL: bool = False
    INCLUDE_EMAIL: bool = False

    class Config:
        env_prefix = "TWITTER_"
        env_file = ".env"
        extra = "ignore"

@lru_cache()
def get_twitter_settings():
    """
    Get the Twitter settings, cached to avoid reloading
    """
    return TwitterSettings()
