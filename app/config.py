"""
Configuration module for the EthicalTrace service.

Centralizes all configuration with environment variable support.
Values are read once at import time.
"""

import os

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("ETHICALTRACE_ENV", "dev")  # dev|stage|prod

# Initial admin identity for every store
ADMIN_IDENTITY = os.getenv("ETHICALTRACE_ADMIN", "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM")

# Block height source: "epoch" derives height from wall-clock time,
# "manual" starts at MANUAL_START_HEIGHT and only moves via /clock/advance
CLOCK_MODE = os.getenv("ETHICALTRACE_CLOCK", "manual")
GENESIS_EPOCH = int(os.getenv("GENESIS_EPOCH", "1735689600"))
BLOCK_SECONDS = int(os.getenv("BLOCK_SECONDS", "600"))
MANUAL_START_HEIGHT = int(os.getenv("MANUAL_START_HEIGHT", "0"))

# Caller authentication
REQUIRE_SIGNED_CALLS = os.getenv("REQUIRE_SIGNED_CALLS", "").lower() in ("1", "true", "yes")
SIGNATURE_FRESHNESS_SECONDS = int(os.getenv("SIGNATURE_FRESHNESS_SECONDS", "300"))

# Rate limits (mutating requests per minute, per caller)
MUTATION_RPM = int(os.getenv("MUTATION_RPM", "120"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("LOG_JSON", "true").lower() in ("1", "true", "yes")


# ============================================================
# Feature Flags
# ============================================================

def is_production() -> bool:
    """Check if running in production mode."""
    return ENV == "prod"


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("ETHICALTRACE_DEBUG", "").lower() in ("1", "true", "yes")


def log_level() -> str:
    """Debug mode forces DEBUG logging regardless of LOG_LEVEL."""
    return "DEBUG" if is_debug() else LOG_LEVEL


def manual_clock_enabled() -> bool:
    """The manual clock may be advanced over HTTP outside production only."""
    return CLOCK_MODE == "manual" and not is_production()
