"""
Instance Storage
================

In-memory storage of UI descriptions addressable by opaque identifier.
"""

from .instance_store import InstanceStore

__all__ = ["InstanceStore"]
