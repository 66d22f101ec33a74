"""HTTP client for a device location endpoint."""

from dataclasses import dataclass

import httpx

from fieldforce.domain.checkpoints import ErrorReason
from fieldforce.domain.errors import GeolocationError
from fieldforce.domain.geo import Coordinate
from fieldforce.services.checkpoints import GeolocationProvider

_DENIED_STATUSES = {401, 403}


@dataclass
class HttpxGeolocationProvider(GeolocationProvider):
    """Reads one position fix from a JSON endpoint returning ``lat``/``lng``."""

    url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str) -> "HttpxGeolocationProvider":
        """Create a provider with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def get_fix(self, timeout_seconds: float) -> Coordinate:
        """Request a fix, mapping transport failures to geolocation errors."""
        try:
            response = await self.http_client.get(self.url, timeout=timeout_seconds)
        except httpx.TimeoutException as exc:
            raise GeolocationError(ErrorReason.LOCATION_TIMEOUT) from exc
        except httpx.HTTPError as exc:
            raise GeolocationError(ErrorReason.LOCATION_UNAVAILABLE, str(exc)) from exc

        if response.status_code in _DENIED_STATUSES:
            raise GeolocationError(ErrorReason.PERMISSION_DENIED)
        if response.status_code >= 400:
            raise GeolocationError(
                ErrorReason.LOCATION_UNAVAILABLE,
                f"Location endpoint returned {response.status_code}",
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise GeolocationError(
                ErrorReason.LOCATION_UNAVAILABLE, "Malformed fix"
            ) from exc
        return _parse_fix(payload)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _parse_fix(payload: object) -> Coordinate:
    """Extract a coordinate from ``{"lat", "lng"}`` or ``{"latitude", "longitude"}``."""
    if not isinstance(payload, dict):
        raise GeolocationError(ErrorReason.LOCATION_UNAVAILABLE, "Malformed fix")
    lat = payload.get("lat", payload.get("latitude"))
    lng = payload.get("lng", payload.get("longitude"))
    if not isinstance(lat, int | float) or not isinstance(lng, int | float):
        raise GeolocationError(ErrorReason.LOCATION_UNAVAILABLE, "Malformed fix")
    return Coordinate(lat=float(lat), lng=float(lng))
