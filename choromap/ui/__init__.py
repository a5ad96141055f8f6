"""
Dash adapter: layout, callbacks and app factory hosting the map charts.
"""
