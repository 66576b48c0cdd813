"""Casbin Enforcer Module

This module builds the Casbin enforcer from the static model and policy files. The enforcer is only
consulted when the :class:`~src.permissions.rbac.AccessControlEvaluator` is constructed; request-time
checks read the evaluator's precomputed, immutable role map instead.

Functions:
    load_enforcer: Builds a Casbin enforcer for the given model and policy files.
"""

import logging
from pathlib import Path
from typing import Optional

import casbin

from .config import MODEL_PATH, POLICY_PATH

logger = logging.getLogger(__name__)


def load_enforcer(model_path: Optional[Path] = None, policy_path: Optional[Path] = None) -> casbin.Enforcer:
    """Initialize a Casbin enforcer from file-based model and policy.

    Args:
        model_path: Override for the model file (defaults to ``MODEL_PATH``).
        policy_path: Override for the policy file (defaults to ``POLICY_PATH``).

    Returns:
        casbin.Enforcer: The initialized enforcer.

    Raises:
        FileNotFoundError: If either file is missing.
    """
    model_path = Path(model_path or MODEL_PATH)
    policy_path = Path(policy_path or POLICY_PATH)

    for path in (model_path, policy_path):
        if not path.is_file():
            logger.error(f"Casbin file not found at {path}")
            raise FileNotFoundError(f"Casbin file not found at {path}")

    enforcer = casbin.Enforcer(str(model_path), str(policy_path))
    logger.info("Casbin enforcer initialized successfully")
    return enforcer
