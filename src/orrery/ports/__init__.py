# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interfaces for body reference data.

Adapters implement these to load catalogs from different storage.
"""
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class BodyCatalogSource(Protocol):
    """Port for reading the static body catalog."""

    def read_catalog(self, path: str | None = None) -> dict[str, Any]:
        """Read the raw catalog mapping (bundled data when path is None)."""
        ...
