class ChoromapError(Exception):
    """Base exception for all choromap errors"""
    pass

class ConfigurationError(ChoromapError):
    """
    Invalid or incomplete configuration:
    no DataController attached, malformed MapConfig or global.json
    """
    pass

class DataShapeError(ChoromapError):
    """
    Input doesn't match the shape the core expects
    feature accessors raising or returning non-primitives, records without a location, etc
    """
    pass
