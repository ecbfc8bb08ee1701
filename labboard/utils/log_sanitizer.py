# =============================================================================
# File: log_sanitizer.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import re
from typing import Any

_CONTROL_CHARS = re.compile(r"[\r\n\t\x00-\x1f\x7f-\x9f]")


def sanitize_for_log(value: Any, max_length: int = 200) -> str:
    """
    Make a value safe to interpolate into a log line.

    Run uuids, experiment names and paths come straight from the request
    URL or the lab folder, so control characters are replaced and long
    values are truncated.
    """
    if value is None:
        return "None"

    sanitized = _CONTROL_CHARS.sub("_", str(value))
    if len(sanitized) > max_length:
        sanitized = sanitized[: max_length - 3] + "..."

    return sanitized
