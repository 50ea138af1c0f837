"""Catalog error types."""


class CatalogError(Exception):
    """Base class for catalog failures reported to the user."""


class ValidationError(CatalogError, ValueError):
    pass


class ReservedNameError(ValidationError):
    pass


class NotFoundError(CatalogError, KeyError):
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ExportError(CatalogError):
    pass


class ImportFailure(CatalogError):
    pass


class PermissionDenied(CatalogError):
    pass
