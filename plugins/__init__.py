# plugins/__init__.py
"""
Plugin System for Twitter Login
===============================

This module provides the foundation for the plugin architecture of the login
service. It defines the base interfaces that all plugins must implement and
provides functionality for plugin registration and management.

The plugin system supports two types of plugins:
1. Strategy Plugins: Run the login handshake with a third-party identity
   provider and turn its answer into a normalized identity
2. Route Plugins: Expose the HTTP endpoints that drive a strategy

Strategy Lifecycle:
-----------------
1. A strategy class is registered under its service name
2. For every login request, the route plugin builds a RequestContext and
   creates a fresh strategy instance through the plugin manager
3. The request phase adjusts the instance's options from the request and
   returns the provider URL to redirect to
4. The callback phase exchanges the provider's answer for credentials and
   returns the auth hash (provider, uid, info, credentials, extra)

Options are copied per instance, so a request phase may freely mutate
them without leaking into other requests.

Adding a New Provider:
--------------------
1. Create a new directory under 'plugins/'
2. Implement a StrategyPlugin with its options model
3. Implement a RoutePlugin that mounts the request and callback endpoints
4. Register both in the __init__.py of your plugin package
"""

from typing import Any, Dict, Optional, Type
import copy
import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict

from plugins.context import RequestContext, StaticRequestContext, StarletteRequestContext

logger = logging.getLogger(__name__)


class PluginType(str, Enum):
    """
    Enum defining the types of plugins supported by the system.

    Types:
        STRATEGY: Plugins that authenticate users against an identity provider
        ROUTE: Plugins that provide HTTP endpoints
    """
    STRATEGY = "strategy"
    ROUTE = "route"

class AuthenticationFailure(ValueError):
    """
    Raised by a strategy when a login attempt cannot be completed.

    Attributes:
        reason (str): Machine-readable failure reason, e.g. "user_denied"
    """

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(message or reason)
        self.reason = reason

class PluginBase:
    """
    Base class for all plugins in the system.

    Class Attributes:
        plugin_type (PluginType): The type of plugin
        service_name (str): Unique identifier for the service this plugin supports
                           (e.g., "twitter")
    """

    plugin_type: PluginType
    service_name: str

    @classmethod
    def get_metadata(cls) -> Dict[str, Any]:
        """
        Return metadata about the plugin for discovery and introspection.

        Returns:
            Dict[str, Any]: Dictionary containing plugin metadata including:
                - plugin_type: The type of plugin
                - service_name: The service this plugin supports
                - class_name: The name of the plugin class
        """
        return {
            "plugin_type": cls.plugin_type,
            "service_name": cls.service_name,
            "class_name": cls.__name__
        }

class StrategyOptions(BaseModel):
    """
    Options shared by every strategy.

    Providers subclass this model to add their own fields. Unknown keys are
    kept so that callers can pass provider specific options through.
    """
    model_config = ConfigDict(extra="allow", validate_assignment=True)

    name: str = ""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    skip_info: bool = False
    path_prefix: str = "/auth"
    callback_path: Optional[str] = None

def merge_options(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge option overrides into a base mapping.

    Nested mappings are merged key by key; any other value replaces the base
    value. Neither argument is modified.

    Args:
        base (Dict[str, Any]): The default options
        overrides (Dict[str, Any]): Caller supplied options

    Returns:
        Dict[str, Any]: The merged options
    """
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, BaseModel):
            value = value.model_dump()
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_options(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged

class StrategyPlugin(PluginBase):
    """
    Base class for authentication strategies.

    A strategy instance lives for one step of one login attempt. It is
    constructed with the RequestContext of the current request and with
    option overrides, which are merged over the class defaults.

    Subclasses must implement request_phase, callback_phase, uid and info.
    The remaining methods have working defaults.

    Class Attributes:
        plugin_type (PluginType): Set to STRATEGY for all strategy plugins
        options_class (Type[StrategyOptions]): Model used to validate options
    """

    plugin_type = PluginType.STRATEGY
    options_class: Type[StrategyOptions] = StrategyOptions

    def __init__(self, context: RequestContext, **overrides: Any):
        self.context = context
        self.options = self.build_options(**overrides)

    @classmethod
    def default_options(cls) -> Dict[str, Any]:
        """
        Runtime defaults layered between the model defaults and the overrides.

        Returns:
            Dict[str, Any]: Default option values, e.g. read from settings
        """
        return {"name": cls.service_name}

    @classmethod
    def build_options(cls, **overrides: Any) -> StrategyOptions:
        """
        Build a fresh options object for one strategy instance.

        Args:
            **overrides: Caller supplied option values

        Returns:
            StrategyOptions: The validated options
        """
        base = cls.options_class().model_dump()
        merged = merge_options(merge_options(base, cls.default_options()), overrides)
        return cls.options_class.model_validate(merged)

    @property
    def name(self) -> str:
        return self.options.name

    def callback_path(self) -> str:
        """
        Get the path the provider redirects back to.

        Returns:
            str: options.callback_path, or "{path_prefix}/{name}/callback"
        """
        return self.options.callback_path or f"{self.options.path_prefix}/{self.name}/callback"

    def callback_url(self) -> str:
        """
        Get the absolute callback URL.

        The default asks the request context to build one for callback_path().

        Returns:
            str: The callback URL
        """
        return self.context.default_callback_url(self.callback_path())

    def skip_info(self) -> bool:
        return bool(self.options.skip_info)

    def request_phase(self) -> str:
        """
        Start a login attempt.

        Returns:
            str: URL to redirect the user agent to

        Raises:
            AuthenticationFailure: If the provider could not be reached
        """
        raise NotImplementedError("Subclasses must implement request_phase")

    def callback_phase(self) -> Dict[str, Any]:
        """
        Finish a login attempt when the provider redirects back.

        Returns:
            Dict[str, Any]: The auth hash, see auth_hash()

        Raises:
            AuthenticationFailure: If the attempt cannot be completed
        """
        raise NotImplementedError("Subclasses must implement callback_phase")

    def uid(self) -> Optional[str]:
        raise NotImplementedError("Subclasses must implement uid")

    def info(self) -> Dict[str, Any]:
        raise NotImplementedError("Subclasses must implement info")

    def credentials(self) -> Dict[str, Any]:
        return {}

    def extra(self) -> Dict[str, Any]:
        return {}

    def auth_hash(self) -> Dict[str, Any]:
        """
        Assemble the normalized result of a successful login.

        Returns:
            Dict[str, Any]: Mapping with provider, uid, info, credentials and extra
        """
        return {
            "provider": self.name,
            "uid": self.uid(),
            "info": self.info(),
            "credentials": self.credentials(),
            "extra": self.extra(),
        }

class RoutePlugin(PluginBase):
    """
    Base class for plugins that provide their own routes.

    The routes provided by a plugin are mounted under the authentication path
    prefix and the service name, e.g. "/auth/[service]/...".

    Class Attributes:
        plugin_type (PluginType): Set to ROUTE for all route plugins
    """

    plugin_type = PluginType.ROUTE

    def get_router(self):
        """
        Get the router for this plugin's routes.

        Returns:
            fastapi.APIRouter: The router with all plugin-specific routes

        Raises:
            NotImplementedError: If the subclass doesn't implement this method
        """
        raise NotImplementedError("Subclasses must implement get_router")

# Plugin registry
_strategy_plugins: Dict[str, Type[StrategyPlugin]] = {}
_route_plugins: Dict[str, Type[RoutePlugin]] = {}

def register_strategy_plugin(plugin_class: Type[StrategyPlugin]) -> None:
    """
    Register a strategy plugin with the system.

    Each plugin is registered under its service_name, which must be unique
    across all strategy plugins. Registering the same name twice replaces
    the earlier class.

    Args:
        plugin_class (Type[StrategyPlugin]): The strategy plugin class to register

    Example:
        >>> class MyStrategy(StrategyPlugin):
        ...     service_name = "my_service"
        >>> register_strategy_plugin(MyStrategy)
    """
    _strategy_plugins[plugin_class.service_name] = plugin_class
    logger.info(f"Registered strategy plugin: {plugin_class.service_name}")

def register_route_plugin(plugin_class: Type[RoutePlugin]) -> None:
    """
    Register a route plugin with the system.

    Args:
        plugin_class (Type[RoutePlugin]): The route plugin class to register
    """
    _route_plugins[plugin_class.service_name] = plugin_class
    logger.info(f"Registered route plugin: {plugin_class.service_name}")

def get_strategy_plugin(service_name: str) -> Optional[Type[StrategyPlugin]]:
    """
    Get a strategy plugin class by its service name.

    Args:
        service_name (str): The unique service name of the plugin to retrieve

    Returns:
        Optional[Type[StrategyPlugin]]: The plugin class if found, None otherwise
    """
    return _strategy_plugins.get(service_name)

def get_route_plugin(service_name: str) -> Optional[Type[RoutePlugin]]:
    """
    Get a route plugin class by its service name.

    Args:
        service_name (str): The unique service name of the plugin to retrieve

    Returns:
        Optional[Type[RoutePlugin]]: The plugin class if found, None otherwise
    """
    return _route_plugins.get(service_name)

def get_all_strategy_plugins() -> Dict[str, Type[StrategyPlugin]]:
    """
    Get all registered strategy plugins.

    The dictionary is a copy of the internal registry, so modifying it will
    not affect the registry.

    Returns:
        Dict[str, Type[StrategyPlugin]]: Dictionary of all registered strategy plugins
    """
    return _strategy_plugins.copy()

def get_all_route_plugins() -> Dict[str, Type[RoutePlugin]]:
    """
    Get all registered route plugins.

    Returns:
        Dict[str, Type[RoutePlugin]]: Dictionary of all registered route plugins
    """
    return _route_plugins.copy()

__all__ = [
    "PluginType", "PluginBase", "AuthenticationFailure",
    "StrategyOptions", "StrategyPlugin", "RoutePlugin", "merge_options",
    "RequestContext", "StaticRequestContext", "StarletteRequestContext",
    "register_strategy_plugin", "register_route_plugin",
    "get_strategy_plugin", "get_route_plugin",
    "get_all_strategy_plugins", "get_all_route_plugins",
]
