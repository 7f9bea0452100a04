"""Offer archive - remembers the analyses you chose to keep."""

import json
import logging
import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from offer_engine.errors import StorageCorrupt
from offer_engine.models import AnalysisResult, OfferInput, SavedOffer

LOGGER = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[SavedOffer])


def is_same_offer(a: OfferInput, b: OfferInput) -> bool:
    """The "already saved" rule: same title, gross salary and city."""
    return (
        a.job_title == b.job_title
        and a.gross_annual_salary == b.gross_annual_salary
        and a.city == b.city
    )


class OfferStore:
    """
    Persistent, newest-first collection of SavedOffer records.

    - One JSON file holds the whole list; it is rewritten on every mutation
    - Writes go to a temp file and are swapped in with os.replace
    - The in-memory list only changes after the file write succeeded
    - A corrupt file at startup is logged and treated as an empty archive

    Single process, single writer. Two processes sharing a file: last write wins.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._offers: list[SavedOffer] = self._load()

    def _load(self) -> list[SavedOffer]:
        if not self.path.exists():
            return []
        try:
            return self._read()
        except StorageCorrupt as e:
            LOGGER.warning("Failed to parse saved offers at %s, starting empty: %s", self.path, e)
            return []

    def _read(self) -> list[SavedOffer]:
        try:
            raw = self.path.read_text(encoding="utf-8")
            if not raw.strip():
                return []
            return _RECORDS.validate_json(raw)
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            raise StorageCorrupt(f"Unreadable offer archive: {e}") from e

    def _write(self, offers: list[SavedOffer]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(
            [offer.model_dump(mode="json", by_alias=True) for offer in offers],
            indent=2,
            ensure_ascii=False,
        )
        fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def _commit(self, offers: list[SavedOffer]) -> None:
        self._write(offers)
        self._offers = offers

    def save(self, input: OfferInput, result: AnalysisResult) -> SavedOffer:
        """
        Archive a new record at the front of the list.

        No deduplication here - check find_duplicate() first if that matters.
        """
        offer = SavedOffer(
            id=str(uuid.uuid4()),
            input=input.model_copy(deep=True),
            result=result.model_copy(deep=True),
            timestamp=datetime.now(timezone.utc),
        )
        self._commit([offer, *self._offers])
        LOGGER.info("Saved offer %s (%s, %s)", offer.id, input.job_title, input.city)
        return offer.model_copy(deep=True)

    def list(self) -> list[SavedOffer]:
        """All records, most recent first. Copies, so callers cannot edit the archive."""
        return [o.model_copy(deep=True) for o in self._offers]

    def get(self, offer_id: str) -> Optional[SavedOffer]:
        offer = next((o for o in self._offers if o.id == offer_id), None)
        return offer.model_copy(deep=True) if offer else None

    def delete(self, offer_id: str) -> bool:
        """Remove one record. Returns False if the id is unknown."""
        remaining = [o for o in self._offers if o.id != offer_id]
        if len(remaining) == len(self._offers):
            return False
        self._commit(remaining)
        LOGGER.info("Deleted offer %s", offer_id)
        return True

    def clear(self) -> None:
        self._commit([])
        LOGGER.info("Cleared offer archive")

    def find_duplicate(self, input: OfferInput) -> Optional[SavedOffer]:
        """First archived record the caller should treat as the same offer."""
        offer = next((o for o in self._offers if is_same_offer(o.input, input)), None)
        return offer.model_copy(deep=True) if offer else None

    def is_saved(self, input: OfferInput) -> bool:
        return self.find_duplicate(input) is not None

    def get_stats(self) -> dict:
        """Get archive statistics."""
        return {
            "offers_stored": len(self._offers),
            "path": str(self.path),
        }
