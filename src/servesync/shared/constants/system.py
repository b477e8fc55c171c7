"""
System-wide base units shared by every constants module.
"""

# Base time units for TTL and interval calculations
BASE_SECOND = 1
BASE_MINUTE = 60 * BASE_SECOND
BASE_HOUR = 60 * BASE_MINUTE


class Application:
    """Application identity constants."""

    NAME = "servesync"
    VERSION = "0.3.0"
    HOME_DIR = ".servesync"
