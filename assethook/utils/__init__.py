"""
Utility functions for the assethook package.

This module provides helpers for bounded concurrent execution, filesystem access to
asset files and retry classification.
"""

from assethook.utils.asyn import async_map
from assethook.utils.fs import (
    asset_file_path,
    get_fs,
    read_asset_file,
    write_asset_file,
)
from assethook.utils.retry import is_retryable_webhook_exception

__all__ = [
    "asset_file_path",
    "async_map",
    "get_fs",
    "is_retryable_webhook_exception",
    "read_asset_file",
    "write_asset_file",
]
