"""
Shared utilities for the Flocker volume client.

This package contains functionality used by the CLI and by services that embed
the client:
- logging_config: consistent logging setup across entry points
"""
