"""
Exceptions raised by the bracket layout engine.
"""


class BracketError(Exception):
    """Base exception for all engine errors."""
    pass


# Layout errors
class MalformedBracketError(BracketError):
    """Raised when bracket data cannot be turned into a valid topology."""
    pass


class UnsupportedBracketTypeError(BracketError):
    """Raised when no layout engine handles the given bracket type."""
    def __init__(self, bracket_type):
        self.bracket_type = bracket_type
        super().__init__(f"Unknown or unsupported bracket type \"{bracket_type}\"")


class MatchGroupCountError(BracketError):
    """Raised when an engine that renders one match group gets more or fewer."""
    def __init__(self, found: int, bracket_type: str = None):
        self.found = found
        self.bracket_type = bracket_type
        msg = "Rendering requires exactly one match group to be present"
        if bracket_type:
            msg = f"Rendering {bracket_type} brackets requires exactly one match group to be present"
        super().__init__(f"{msg}! (Found {found})")


# Request errors (importer boundary)
class MissingParameterError(BracketError):
    """Raised when a bracket request lacks a required selector."""
    def __init__(self, parameter: str, bracket_type: str = None):
        self.parameter = parameter
        self.bracket_type = bracket_type
        msg = f"A {parameter} is required"
        if bracket_type:
            msg += f" when rendering brackets of type {bracket_type}"
        super().__init__(msg)


# Configuration errors
class LayoutConfigError(BracketError):
    """Raised when layout settings are invalid."""
    pass
