"""In-memory POI store with the same contract as PoiClient.

Used by the app when no POI_API_URL is configured. State lives for the
lifetime of the process only.
"""

import base64
import binascii
import logging
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date
from typing import Any

from orbitmoments.client import PoiServiceError, sort_pois
from orbitmoments.daykeys import as_date
from orbitmoments.models import PointOfInterest

logger = logging.getLogger(__name__)

SAMPLE_POIS: tuple[PointOfInterest, ...] = (
    PointOfInterest("poi0", date(2025, 1, 20), "Very First Date", "Our magical first time together."),
    PointOfInterest("poi1", date(2025, 1, 20), '"First" Date', "Our magical truly first time together."),
    PointOfInterest("poi2", date(2025, 11, 7), "The Beach Day", "A sunny day by the sea."),
    PointOfInterest("poi3", date(2025, 5, 18), "New Year Together", "Ringing in the new year."),
    PointOfInterest("poi5", date(2024, 5, 20), "Bestest day ever", "Ringing in the bestest year."),
)


class MemoryPoiStore:
    """Dict-backed POI and image store.

    ``fetch_pois`` returns a fresh sorted list; mutations return the stored POI.
    """

    def __init__(self, seed: Iterable[PointOfInterest] = SAMPLE_POIS):
        self._pois: list[PointOfInterest] = sort_pois(list(seed))
        self._images: dict[str, tuple[str, bytes]] = {}

    def _index(self, poi_id: str) -> int:
        for i, p in enumerate(self._pois):
            if p.id == poi_id:
                return i
        raise PoiServiceError(f"POI not found: {poi_id}")

    def fetch_pois(self) -> list[PointOfInterest]:
        return list(self._pois)

    def create_poi(
        self,
        *,
        date: Any,
        title: str,
        description: str = "",
        image_urls: Sequence[str] = (),
    ) -> PointOfInterest:
        if not title or not title.strip() or date is None:
            raise PoiServiceError("title and date are required")
        poi = PointOfInterest(
            id=uuid.uuid4().hex,
            date=as_date(date),
            title=title.strip(),
            description=description,
            image_urls=tuple(image_urls),
        )
        self._pois = sort_pois([*self._pois, poi])
        logger.info("Created POI %s on %s", poi.id, poi.date)
        return poi

    def update_poi(self, poi_id: str, **patch: Any) -> PointOfInterest:
        i = self._index(poi_id)
        changes: dict[str, Any] = {}
        if "date" in patch:
            changes["date"] = as_date(patch["date"])
        if "title" in patch:
            if not patch["title"] or not patch["title"].strip():
                raise PoiServiceError("title must not be empty")
            changes["title"] = patch["title"].strip()
        if "description" in patch:
            changes["description"] = patch["description"] or ""
        if "image_urls" in patch:
            changes["image_urls"] = tuple(patch["image_urls"])
        updated = replace(self._pois[i], **changes)
        pois = list(self._pois)
        pois[i] = updated
        self._pois = sort_pois(pois)
        return updated

    def delete_poi(self, poi_id: str) -> None:
        i = self._index(poi_id)
        del self._pois[i]

    def upload_image(self, content_type: str, data_base64: str) -> dict[str, str]:
        try:
            data = base64.b64decode(data_base64, validate=True)
        except binascii.Error as e:
            raise PoiServiceError(f"Invalid image payload: {e}") from e
        image_id = uuid.uuid4().hex
        self._images[image_id] = (content_type, data)
        return {"id": image_id, "url": f"/images/{image_id}"}

    def read_image(self, image_id: str) -> tuple[str, bytes] | None:
        """(content_type, bytes) for an uploaded image, or None."""
        return self._images.get(image_id)
