"""
Global configuration for the canister metrics exporter.

This module contains environment-specific settings shared by every component.
"""

import os

_SUPPORTED_NX_GOV_ENVS: list[str] = ["prod", "test"]

NX_GOV_ENV = os.environ.get("NX_GOV_ENV", "prod").lower()
"""The environment flag ('prod' or 'test'). Defaults to 'prod'."""

if NX_GOV_ENV not in _SUPPORTED_NX_GOV_ENVS:
    raise ValueError(
        f"Invalid NX_GOV_ENV environment variable: '{NX_GOV_ENV}'. "
        f"Supported values: {_SUPPORTED_NX_GOV_ENVS}"
    )
