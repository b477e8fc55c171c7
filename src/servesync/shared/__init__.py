"""Shared utilities for servesync: constants, errors and structured logging."""
