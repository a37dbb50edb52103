# catering/errors.py


class CateringError(Exception):
    """Base class for business-rule failures; routers map these to 400."""


class OrderValidationError(CateringError):
    pass


class InvalidTransitionError(CateringError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Invalid status transition from '{current}' to '{requested}'")


class CatalogError(CateringError):
    pass
