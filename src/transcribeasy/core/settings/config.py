"""
Centralized application configuration.

Edit the variables below to configure development settings.
"""

import logging

# =============================================================================
# DEVELOPMENT SETTINGS - Edit these for local development
# =============================================================================
LOG_LEVEL = "DEBUG"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_TO_CONSOLE = True  # Set to True to output logs to terminal
# =============================================================================

# =============================================================================
# MODEL DOWNLOAD SETTINGS
# =============================================================================
PROGRESS_UPDATE_INTERVAL_MS = 50  # Minimum gap between UI progress updates
DOWNLOAD_CHUNK_SIZE = 64 * 1024  # Bytes read from the response per iteration
CONNECT_TIMEOUT_S = 10.0
READ_TIMEOUT_S = 15.0  # Bounds how long a stalled read can delay a cancel
# =============================================================================


def get_log_level() -> int:
    """Get the logging level as an integer."""
    return getattr(logging, LOG_LEVEL.upper(), logging.INFO)
