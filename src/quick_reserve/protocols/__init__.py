# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Protocol definitions for quick-reserve components.

Available protocols:
- ResourceSourceProtocol: Interface for whatever owns the resource collection
"""

from .resource_source import ResourceSourceProtocol

__all__ = ["ResourceSourceProtocol"]
