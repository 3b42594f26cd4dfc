"""
Shared utility functions for multiglot.

This module contains common utilities used across the codebase.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.
    
    Args:
        prefix: Optional prefix (e.g., "hist")
        
    Returns:
        A unique ID like "hist_a1b2c3d4e5f6"
    """
    uid = uuid.uuid4().hex[:12]
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def now_ms() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)
