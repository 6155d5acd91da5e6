# plugin_manager.py
"""
Plugin Manager for Twitter Login
================================

This module provides utilities for discovering, loading, and managing plugins.
It serves as the central coordination point for plugin operations, handling
plugin discovery, instantiation, and access to plugin routers.

Usage:
------
The plugin_manager is instantiated as a singleton at the module level and should be
imported and used directly by application code:

    from plugin_manager import plugin_manager

    # Discover available plugins
    plugin_manager.discover_plugins()

    # Create a strategy for the current request
    strategy = plugin_manager.create_strategy("twitter", context)

    # Mount the routers of all route plugins
    for service_name, router in plugin_manager.get_service_routers().items():
        app.include_router(router, prefix=f"/auth/{service_name}")
"""

import importlib
import logging
import os
from typing import Any, Dict, Optional, Type

from fastapi import APIRouter

from plugins import (
    RequestContext,
    RoutePlugin,
    StrategyPlugin,
    get_all_route_plugins,
    get_all_strategy_plugins,
    get_route_plugin,
    get_strategy_plugin
)

logger = logging.getLogger(__name__)

class PluginManager:
    """
    Manager for login plugins.

    The PluginManager is responsible for:
    - Discovering plugin packages in the plugins directory
    - Creating strategy instances for a request
    - Collecting the routers of route plugins

    It acts as a facade over the lower-level plugin registry in the plugins
    module.
    """

    def __init__(self):
        """
        Initialize the plugin manager.

        Plugins are not loaded during initialization; discover_plugins must be
        called to import the plugin packages.
        """
        self._plugin_dir = os.path.join(os.path.dirname(__file__), "plugins")
        self._loaded_plugins = set()

    def discover_plugins(self):
        """
        Discover plugins in the plugins directory.

        Every subdirectory of the plugins directory that is a Python package is
        imported once. Importing a package is expected to register its plugins
        with the plugin registry. Import errors are logged and skipped so that
        one broken provider does not take the others down.
        """
        for item in sorted(os.listdir(self._plugin_dir)):
            package_dir = os.path.join(self._plugin_dir, item)
            if not os.path.isfile(os.path.join(package_dir, "__init__.py")) or item.startswith('__'):
                continue
            module_name = f"plugins.{item}"
            if module_name in self._loaded_plugins:
                continue
            try:
                importlib.import_module(module_name)
                self._loaded_plugins.add(module_name)
                logger.info(f"Discovered plugin: {module_name}")
            except ImportError as e:
                logger.error(f"Error loading plugin {module_name}: {e}")

    def get_strategy_plugin(self, service_name: str) -> Optional[Type[StrategyPlugin]]:
        return get_strategy_plugin(service_name)

    def get_all_strategy_plugins(self) -> Dict[str, Type[StrategyPlugin]]:
        return get_all_strategy_plugins()

    def create_strategy(self, service_name: str, context: RequestContext, **options: Any) -> Optional[StrategyPlugin]:
        """
        Create a strategy instance for one request.

        Args:
            service_name (str): The unique service name of the strategy
            context (RequestContext): The request context of the current request
            **options: Option overrides passed to the strategy constructor

        Returns:
            Optional[StrategyPlugin]: A strategy instance if the plugin was found,
                                      None otherwise

        Example:
            >>> strategy = plugin_manager.create_strategy("twitter", context, use_authorize=True)
            >>> if strategy:
            ...     redirect_url = strategy.request_phase()
        """
        plugin_class = self.get_strategy_plugin(service_name)
        if plugin_class:
            return plugin_class(context, **options)
        logger.error(f"No strategy plugin registered for {service_name}")
        return None

    def create_route_plugin(self, service_name: str, **kwargs) -> Optional[RoutePlugin]:
        plugin_class = get_route_plugin(service_name)
        if plugin_class:
            return plugin_class(**kwargs)
        return None

    def get_service_routers(self) -> Dict[str, APIRouter]:
        """
        Get all routers from plugins that implement the RoutePlugin interface.

        Returns:
            Dict[str, APIRouter]: Dictionary mapping service names to their routers
        """
        routers = {}
        for service_name in get_all_route_plugins():
            plugin = self.create_route_plugin(service_name)
            routers[service_name] = plugin.get_router()
        return routers

# Create a singleton instance of the plugin manager
plugin_manager = PluginManager()
