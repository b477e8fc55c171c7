"""Shared CLI helpers: context, options, output and error handling."""
