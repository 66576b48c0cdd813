"""Repository interfaces for abstracting data persistence in the domain layer.

This module defines the abstract base classes (interfaces) for repositories,
which act as a "port" in the context of Hexagonal Architecture. The domain layer
uses these interfaces to interact with the credential store without being
coupled to any specific technology.

Repositories never commit. The calling service owns the transaction so that
multi-row operations stay atomic.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.domain.entities.user import User


class IUserRepository(ABC):
    """An interface defining the contract for user persistence operations.

    This repository is responsible for managing the lifecycle of the `User`
    aggregate root. Only the operations the authentication core needs are part
    of the contract.
    """

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Retrieves a user by their unique identifier.

        Args:
            user_id: The unique integer ID of the user.

        Returns:
            An optional `User` entity. Returns `None` if no user is found.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_id_for_update(self, user_id: int) -> Optional[User]:
        """Retrieves a user and locks the row until the transaction ends.

        Used to serialize concurrent changes to a user's sign-in methods.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Retrieves a user by their email address (case-insensitively).

        Args:
            email: The email address to search for.

        Returns:
            An optional `User` entity. Returns `None` if no user is found.
        """
        raise NotImplementedError

    @abstractmethod
    async def add(self, user: User) -> User:
        """Stages a new or modified user and flushes it so it receives an id."""
        raise NotImplementedError

    @abstractmethod
    async def list(self, offset: int = 0, limit: int = 50) -> List[User]:
        """Returns users ordered by id."""
        raise NotImplementedError
