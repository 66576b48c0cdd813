"""Role-based access control: Casbin policy, evaluator and FastAPI dependencies."""

from .rbac import AccessControlEvaluator, Permission

__all__ = ["AccessControlEvaluator", "Permission"]
