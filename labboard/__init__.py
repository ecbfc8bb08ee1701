# =============================================================================
# File: __init__.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Labboard: experiment dashboard backend with an adaptive run cache."""

__version__ = "0.1.0"
