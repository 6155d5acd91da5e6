from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # Session Management
    SESSION_EXPIRY_HOURS: int = 1
    SESSION_COOKIE_NAME: str = "twitter_login_session"
    SESSION_SAME_SITE: str = "lax"
    SESSION_HTTPS_ONLY: bool = False  # Set to True in production

    # Security
    SECRET_KEY: str = "your-secret-key-here"  # Change this in production!

    # Authentication paths
    AUTH_PATH_PREFIX: str = "/auth"
    LOGIN_REDIRECT_URL: str = "/"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Plugin System Settings
    PLUGINS_AUTO_DISCOVER: bool = True

    class Config:
        env_file = ".env"
        extra = "ignore"  # Allow extra fields from environment variables

@lru_cache()
def get_settings():
    return Settings()
