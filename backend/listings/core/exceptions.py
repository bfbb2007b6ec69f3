"""Exception hierarchy shared by the API, services and admin scripts."""

from typing import Optional


class ListingsError(Exception):
    """Base class for all errors raised by the listings backend."""


class ConfigurationError(ListingsError):
    """Required configuration is missing or inconsistent."""


class PropertyNotFoundError(ListingsError):
    """No property row exists for the requested identifier."""

    def __init__(self, property_id: str):
        super().__init__(f"Property not found: {property_id}")
        self.property_id = property_id


class ImageNotFoundError(ListingsError):
    def __init__(self, image_id: int):
        super().__init__(f"Image not found: {image_id}")
        self.image_id = image_id


class MigrationError(ListingsError):
    """A migration step failed and its transaction was rolled back."""

    def __init__(self, step_name: str, cause: BaseException):
        super().__init__(f"Migration step '{step_name}' failed: {cause}")
        self.step_name = step_name
        self.cause = cause


class ConfirmationRequiredError(ListingsError):
    """A destructive step was requested without explicit confirmation."""

    def __init__(self, step_names: list[str]):
        names = ", ".join(step_names)
        super().__init__(f"Destructive steps require confirmation: {names}")
        self.step_names = step_names


class GeocodingError(ListingsError):
    """The geocoder returned no usable location."""

    def __init__(self, address: str, status: Optional[str] = None):
        super().__init__(f"Could not geocode '{address}': {status or 'no result'}")
        self.address = address
        self.status = status


class BlobUploadError(ListingsError):
    """Upload to blob storage failed."""
