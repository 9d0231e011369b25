"""POI service client: REST calls over httpx plus wire ↔ model normalization."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from orbitmoments.daykeys import as_date
from orbitmoments.models import PointOfInterest

logger = logging.getLogger(__name__)


class PoiServiceError(Exception):
    """POI fetch or mutation failure (network, HTTP status, or validation)."""


def poi_from_dto(dto: Mapping[str, Any]) -> PointOfInterest:
    """Normalize a wire DTO (ISO ``date``, optional ``imageURLs``) to a PointOfInterest."""
    return PointOfInterest(
        id=str(dto["id"]),
        date=as_date(dto["date"]),
        title=dto.get("title") or "",
        description=dto.get("description") or "",
        image_urls=tuple(dto.get("imageURLs") or ()),
    )


def poi_to_dto(poi: PointOfInterest) -> dict[str, Any]:
    return {
        "id": poi.id,
        "date": poi.date.isoformat(),
        "title": poi.title,
        "description": poi.description,
        "imageURLs": list(poi.image_urls),
    }


def sort_pois(pois: Sequence[PointOfInterest]) -> list[PointOfInterest]:
    """Stable ascending sort by date; same-day entries keep their input order."""
    return sorted(pois, key=lambda p: p.date)


class PoiClient:
    """Thin REST client for ``/pois`` and ``/images/upload`` under ``base_url``.

    Every failure surfaces as PoiServiceError so callers have one thing to catch.
    """

    def __init__(self, base_url: str, client: httpx.Client | None = None, timeout: float = 10):
        self._http = client or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._http.request(method, url, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PoiServiceError(
                f"{method} {url} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise PoiServiceError(f"{method} {url} failed: {e}") from e
        return resp

    def fetch_pois(self) -> list[PointOfInterest]:
        """All POIs, normalized and sorted ascending by date."""
        resp = self._request("GET", "/pois", headers={"Cache-Control": "no-store"})
        pois = sort_pois([poi_from_dto(d) for d in resp.json()])
        logger.info("Fetched %d POIs", len(pois))
        return pois

    def create_poi(
        self,
        *,
        date: Any,
        title: str,
        description: str = "",
        image_urls: Sequence[str] = (),
    ) -> PointOfInterest:
        body = {
            "date": as_date(date).isoformat(),
            "title": title,
            "description": description,
            "imageURLs": list(image_urls),
        }
        return poi_from_dto(self._request("POST", "/pois", json=body).json())

    def update_poi(self, poi_id: str, **patch: Any) -> PointOfInterest:
        """PUT a partial update. Accepts ``date``, ``title``, ``description``, ``image_urls``."""
        body: dict[str, Any] = {}
        if "date" in patch:
            body["date"] = as_date(patch["date"]).isoformat()
        for key in ("title", "description"):
            if key in patch:
                body[key] = patch[key]
        if "image_urls" in patch:
            body["imageURLs"] = list(patch["image_urls"])
        return poi_from_dto(self._request("PUT", f"/pois/{poi_id}", json=body).json())

    def delete_poi(self, poi_id: str) -> None:
        self._request("DELETE", f"/pois/{poi_id}")

    def upload_image(self, content_type: str, data_base64: str) -> dict[str, str]:
        """Store an image and return ``{"id": ..., "url": ...}``."""
        resp = self._request(
            "POST",
            "/images/upload",
            json={"contentType": content_type, "dataBase64": data_base64},
        )
        payload = resp.json()
        return {"id": str(payload["id"]), "url": str(payload["url"])}
