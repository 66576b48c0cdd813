"""Domain Interfaces for dependency inversion.

These interfaces define contracts that the infrastructure layer implements,
keeping domain services independent of persistence technology.
"""

from .repositories import IUserRepository

__all__ = ["IUserRepository"]
