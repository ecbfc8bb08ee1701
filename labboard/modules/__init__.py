"""Shared building blocks used by the services layer.

Expose commonly used submodules to avoid __all__ mismatches reported by static
analyzers.
"""

from . import concurrent_dict  # re-export module

__all__ = ["concurrent_dict"]
