from .map_view import MapChart
from .map_text import feature_label, legend_entries, tooltip_html

__all__ = ["MapChart", "feature_label", "legend_entries", "tooltip_html"]
