# Standard library imports
import logging

# Third-party imports
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

# Local imports
from config import get_settings

# Plugin system
from plugin_manager import plugin_manager

# Get settings
settings = get_settings()

# Set up logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Twitter Login")

# Sessions carry the request token between the two login phases
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_EXPIRY_HOURS * 3600,
    same_site=settings.SESSION_SAME_SITE,
    https_only=settings.SESSION_HTTPS_ONLY
)

# Initialize plugins
if settings.PLUGINS_AUTO_DISCOVER:
    plugin_manager.discover_plugins()

# Root route
@app.get("/")
async def root(request: Request):
    """Show the identity of the logged in user, if any."""
    auth = request.session.get("auth")
    if not auth:
        return {"authenticated": False}
    return {
        "authenticated": True,
        "provider": auth.get("provider"),
        "uid": auth.get("uid"),
        "info": auth.get("info"),
    }

@app.get(f"{settings.AUTH_PATH_PREFIX}/failure")
async def auth_failure(message: str = "unknown_error", strategy: str = ""):
    """Render a failed login."""
    return JSONResponse(
        status_code=401,
        content={"error": message, "strategy": strategy}
    )

@app.get(f"{settings.AUTH_PATH_PREFIX}/logout")
async def logout(request: Request):
    """Forget the logged in user."""
    request.session.pop("auth", None)
    return {"authenticated": False}

# Include service-specific routers from plugins
service_routers = plugin_manager.get_service_routers()
for service_name, router in service_routers.items():
    app.include_router(router, prefix=f"{settings.AUTH_PATH_PREFIX}/{service_name}")
    logger.info(f"Mounted routes for service: {service_name}")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level=settings.LOG_LEVEL.lower()
    )
