# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
JSON body catalog adapter.

Reads the bundled catalog (orrery/data/bodies.json) or a custom file and
builds SolarSystem instances from it.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from orrery.ports import BodyCatalogSource
from orrery.domain.catalog import parse_catalog
from orrery.domain.coordinate_frames import DEFAULT_SCALE, SceneScale
from orrery.domain.solar_system import BodyDefinition, SolarSystem
from orrery.domain.time_systems import J2000_EPOCH

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent.parent / "data" / "bodies.json"

_CACHED_CATALOG: Optional[dict[str, Any]] = None


class JsonCatalogReader(BodyCatalogSource):
    """Reads body catalogs from JSON files."""

    def read_catalog(self, path: str | None = None) -> dict[str, Any]:
        global _CACHED_CATALOG

        if path is None and _CACHED_CATALOG is not None:
            return _CACHED_CATALOG

        data_path = DEFAULT_CATALOG_PATH if path is None else Path(path)
        with open(data_path, encoding='utf-8') as f:
            data = json.load(f)

        if "bodies" not in data:
            raise ValueError(f"Catalog {data_path} has no 'bodies' section")
        logger.debug("Loaded %d bodies from %s", len(data["bodies"]), data_path)

        if path is None:
            _CACHED_CATALOG = data
        return data


def load_bodies(
    path: str | None = None,
    source: BodyCatalogSource | None = None,
    scale: SceneScale = DEFAULT_SCALE,
) -> list[BodyDefinition]:
    """Parsed body definitions from a catalog source."""
    source = source or JsonCatalogReader()
    return parse_catalog(source.read_catalog(path), au_km=scale.au_km)


def load_default_system(
    path: str | None = None,
    start_epoch: datetime = J2000_EPOCH,
    accurate_orbits: bool = True,
    apply_secular_rates: bool = False,
    scale: SceneScale = DEFAULT_SCALE,
) -> SolarSystem:
    """SolarSystem built from the bundled (or given) catalog."""
    return SolarSystem(
        load_bodies(path, scale=scale),
        start_epoch=start_epoch,
        accurate_orbits=accurate_orbits,
        apply_secular_rates=apply_secular_rates,
        scale=scale,
    )
