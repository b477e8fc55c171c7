"""Command-line interface for servesync."""
