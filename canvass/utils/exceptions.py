"""Custom exceptions for the canvassing API"""

class CanvassException(Exception):
    """Base exception for the canvassing API"""
    status_code = 400

class ValidationError(CanvassException):
    """Raised when input validation fails"""
    pass

class InvalidPolygonError(ValidationError):
    """Raised when a polygon has too few or non-numeric points"""
    pass

class InvalidBoundsError(ValidationError):
    """Raised when viewport bounds are missing or non-numeric"""
    pass

class AreaTooLargeError(CanvassException):
    """Raised when a drawn area exceeds the query ceiling"""

    def __init__(self, area: float, limit: float, unit: str = "acres"):
        self.area = area
        self.limit = limit
        self.unit = unit
        super().__init__(
            f"Area too large. Please draw a smaller area (max {limit:g} {unit}). "
            f"Your selection is {area:.1f} {unit}."
        )

class NotFoundError(CanvassException):
    """Raised when a route or route address does not exist"""
    status_code = 404

class DatabaseError(CanvassException):
    """Raised when a database query fails"""
    status_code = 500

class ConfigurationError(CanvassException):
    """Raised when configuration is invalid"""
    status_code = 500
