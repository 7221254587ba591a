"""Address geocoding services."""

from .cache import UNRESOLVED, GeocodeCache, normalize_address
from .client import GeocodingError, NominatimClient, check_health
from .resolver import AddressResolver

__all__ = [
    "AddressResolver",
    "GeocodeCache",
    "GeocodingError",
    "NominatimClient",
    "UNRESOLVED",
    "check_health",
    "normalize_address",
]
