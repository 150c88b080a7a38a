"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations on top of one shared
DocumentStore.
"""

from typing import TYPE_CHECKING

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from shared.store import BaseDocumentStore
    from modules.users.interfaces import IUserService
    from modules.connections.interfaces import IConnectionRequestService, IConnectionService
    from modules.vaults.interfaces import IVaultAccessController
    from modules.events.interfaces import IEventService
    from modules.needs.interfaces import INeedService


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self) -> None:
        self._store: "BaseDocumentStore | None" = None
        self._user_service: "IUserService | None" = None
        self._connection_request_service: "IConnectionRequestService | None" = None
        self._connection_service: "IConnectionService | None" = None
        self._vault_service: "IVaultAccessController | None" = None
        self._event_service: "IEventService | None" = None
        self._need_service: "INeedService | None" = None

    @property
    def store(self) -> "BaseDocumentStore":
        """Get the document store all repositories share."""
        if self._store is None:
            from shared.database import get_document_store
            self._store = get_document_store()
        return self._store

    @property
    def users(self) -> "IUserService":
        """Get the user profile service instance."""
        if self._user_service is None:
            from modules.users.repository import UserRepository
            from modules.users.service import UserService
            self._user_service = UserService(UserRepository(self.store))
        return self._user_service

    @property
    def connection_requests(self) -> "IConnectionRequestService":
        """Get the connection request service instance."""
        if self._connection_request_service is None:
            from modules.connections.repository import (
                ConnectionRepository,
                ConnectionRequestRepository,
            )
            from modules.connections.service import ConnectionRequestService
            self._connection_request_service = ConnectionRequestService(
                requests=ConnectionRequestRepository(self.store),
                connections=ConnectionRepository(self.store),
            )
        return self._connection_request_service

    @property
    def connections(self) -> "IConnectionService":
        """Get the connection list service instance."""
        if self._connection_service is None:
            from modules.connections.repository import ConnectionRepository
            from modules.connections.service import ConnectionService
            self._connection_service = ConnectionService(ConnectionRepository(self.store))
        return self._connection_service

    @property
    def vaults(self) -> "IVaultAccessController":
        """Get the vault access controller instance."""
        if self._vault_service is None:
            from modules.vaults.repository import VaultRepository
            from modules.vaults.service import VaultAccessController
            self._vault_service = VaultAccessController(
                repository=VaultRepository(self.store),
                users=self.users,
            )
        return self._vault_service

    @property
    def events(self) -> "IEventService":
        """Get the calendar event service instance."""
        if self._event_service is None:
            from modules.events.repository import EventRepository
            from modules.events.service import EventService
            self._event_service = EventService(EventRepository(self.store))
        return self._event_service

    @property
    def needs(self) -> "INeedService":
        """Get the need service instance."""
        if self._need_service is None:
            from modules.needs.repository import NeedRepository
            from modules.needs.service import NeedService
            self._need_service = NeedService(NeedRepository(self.store))
        return self._need_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._store = None
        self._user_service = None
        self._connection_request_service = None
        self._connection_service = None
        self._vault_service = None
        self._event_service = None
        self._need_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_user_service() -> "IUserService":
    """FastAPI dependency for user profile service."""
    return get_container().users


def get_connection_request_service() -> "IConnectionRequestService":
    """FastAPI dependency for connection request service."""
    return get_container().connection_requests


def get_connection_service() -> "IConnectionService":
    """FastAPI dependency for connection list service."""
    return get_container().connections


def get_vault_service() -> "IVaultAccessController":
    """FastAPI dependency for vault access controller."""
    return get_container().vaults


def get_event_service() -> "IEventService":
    """FastAPI dependency for calendar event service."""
    return get_container().events


def get_need_service() -> "INeedService":
    """FastAPI dependency for need service."""
    return get_container().needs
