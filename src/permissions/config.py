"""
Casbin Configuration Module

This module defines the configuration paths for the Casbin access control system. The model file
declares a plain RBAC model with role inheritance; the policy file grants ``(resource, action)``
pairs to roles and declares the inheritance chain ``admin -> editor -> user``.

**Security Note**: The policy file is the single source of truth for what each role may do. It is
loaded once at process start and never modified at runtime.

Attributes:
    MODEL_PATH (Path): The absolute path to the Casbin model configuration file (model.conf).
    POLICY_PATH (Path): The absolute path to the Casbin policy file (policy.csv).
"""

from pathlib import Path

# Define paths for Casbin model and policy files using pathlib for cross-platform compatibility
BASE_DIR = Path(__file__).parent.resolve()
MODEL_PATH: Path = BASE_DIR / "model.conf"
POLICY_PATH: Path = BASE_DIR / "policy.csv"
