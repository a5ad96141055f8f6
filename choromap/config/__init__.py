"""
Config package for choromap.

Responsible for:
- config models (MapConfig, GlobalConfig)
- config I/O helpers (load_global_config / load_records / load_geojson)
"""

from .model import GlobalConfig, MapConfig
from .loader import load_geojson, load_global_config, load_records

__all__ = ["GlobalConfig", "MapConfig", "load_geojson", "load_global_config", "load_records"]
