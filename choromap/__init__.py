"""
Top-level package for the choropleth map browser.

This package exposes the core architecture (data, geometry, views, UI adapters).
Most code should import from submodules such as:
    choromap.core
    choromap.geo
    choromap.views
    choromap.ui
"""

__all__: list[str] = []
