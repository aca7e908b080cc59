"""
JSON-file booking store.

Loads companies, services, providers, bookings and queue entries from a
single JSON document, standing in for the remote data store the booking
and queue screens read from.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime

from ..domain.exceptions import DataStoreError, RecordNotFoundError
from ..domain.models import (
    Booking,
    BookingStatus,
    Company,
    Provider,
    QueueEntry,
    QueueEntryStatus,
    Service,
)

logger = logging.getLogger(__name__)

SAMPLE_DATA_FILE = Path(__file__).parent / "sample_data.json"


class JsonBookingStore:
    """
    Booking store backed by a JSON file.

    Catalogue records (companies, services, providers) are indexed by id.
    Booking and queue records that cannot be parsed are skipped with a
    warning so one bad row does not hide a provider's whole schedule.
    """

    def __init__(self, data_file: Optional[Path] = None, timezone: str = "Europe/Berlin"):
        """
        Initialize the store.

        Args:
            data_file: Path to the JSON document; defaults to the bundled sample
            timezone: IANA timezone for timestamps without an offset

        Raises:
            DataStoreError: If the file cannot be read or is not a JSON object
        """
        self.data_file = Path(data_file) if data_file else SAMPLE_DATA_FILE
        self.timezone = timezone
        self._load_data()

    def _load_data(self) -> None:
        """Load and index all records from the data file."""
        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as exc:
            raise DataStoreError(f"Could not read data file {self.data_file}: {exc}") from exc
        except ValueError as exc:
            raise DataStoreError(f"Invalid JSON in {self.data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise DataStoreError("Data file must contain an object at the root level.")

        self.companies: Dict[str, Company] = {
            str(record["id"]): Company(
                id=str(record["id"]),
                name=record.get("name", ""),
                working_hours=record.get("working_hours"),
            )
            for record in self._records(data, "companies")
        }
        self.services: Dict[str, Service] = {
            str(record["id"]): Service(
                id=str(record["id"]),
                name=record.get("name", ""),
                estimated_duration_minutes=record.get("estimated_duration_minutes"),
                company_id=str(record.get("company_id", "")),
            )
            for record in self._records(data, "services")
        }
        self.providers: Dict[str, Provider] = {
            str(record["id"]): Provider(
                id=str(record["id"]),
                name=record.get("name", ""),
                company_id=str(record.get("company_id", "")),
            )
            for record in self._records(data, "providers")
        }

        self.bookings: List[Booking] = []
        for record in self._records(data, "bookings"):
            booking = self._parse_booking(record)
            if booking is not None:
                self.bookings.append(booking)

        self.queue_entries: List[QueueEntry] = []
        for record in self._records(data, "queue_entries"):
            entry = self._parse_queue_entry(record)
            if entry is not None:
                self.queue_entries.append(entry)

        logger.debug(
            "Loaded %d companies, %d services, %d providers, %d bookings, %d queue entries from %s",
            len(self.companies), len(self.services), len(self.providers),
            len(self.bookings), len(self.queue_entries), self.data_file
        )

    @staticmethod
    def _records(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        records = data.get(key) or []
        if not isinstance(records, list):
            raise DataStoreError(f"'{key}' must be a list in the data file.")

        valid = []
        for record in records:
            if not isinstance(record, dict):
                logger.warning("Skipping non-object %s record: %r", key, record)
                continue
            if key in ("companies", "services", "providers") and "id" not in record:
                logger.warning("Skipping %s record without id: %r", key, record)
                continue
            valid.append(record)
        return valid

    def _parse_time(self, value: Any) -> DateTime:
        parsed = pendulum.parse(value, tz=self.timezone)
        if not isinstance(parsed, DateTime):
            raise ValueError(f"Expected a date and time, got {value!r}")
        return parsed

    def _parse_booking(self, record: Dict[str, Any]) -> Optional[Booking]:
        try:
            return Booking(
                id=str(record.get("id", "")),
                start_time=self._parse_time(record["start_time"]),
                end_time=self._parse_time(record["end_time"]),
                provider_id=record.get("provider_id"),
                service_id=record.get("service_id"),
                status=BookingStatus(record.get("status", BookingStatus.PENDING.value)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping invalid booking %r: %s", record.get("id"), exc)
            return None

    def _parse_queue_entry(self, record: Dict[str, Any]) -> Optional[QueueEntry]:
        try:
            position = record.get("position")
            return QueueEntry(
                id=str(record.get("id", "")),
                provider_id=record.get("provider_id"),
                service_id=record.get("service_id"),
                status=QueueEntryStatus(record.get("status", QueueEntryStatus.WAITING.value)),
                position=int(position) if position is not None else None,
            )
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping invalid queue entry %r: %s", record.get("id"), exc)
            return None

    async def get_company(self, company_id: str) -> Company:
        try:
            return self.companies[company_id]
        except KeyError:
            raise RecordNotFoundError(f"Unknown company: '{company_id}'") from None

    async def get_service(self, service_id: str) -> Service:
        try:
            return self.services[service_id]
        except KeyError:
            raise RecordNotFoundError(f"Unknown service: '{service_id}'") from None

    async def get_provider(self, provider_id: str) -> Provider:
        try:
            return self.providers[provider_id]
        except KeyError:
            raise RecordNotFoundError(f"Unknown provider: '{provider_id}'") from None

    async def get_confirmed_bookings(
        self,
        provider_id: str,
        start_time: DateTime,
        end_time: DateTime,
    ) -> List[Booking]:
        """
        Return confirmed bookings of the provider overlapping the time window.

        Results are ordered by start time.
        """
        matching = [
            booking for booking in self.bookings
            if booking.blocks(provider_id)
            and booking.start_time < end_time
            and booking.end_time > start_time
        ]
        return sorted(matching, key=lambda booking: booking.start_time)

    async def get_active_queue_entries(
        self,
        service_id: str,
        provider_id: str,
    ) -> List[QueueEntry]:
        """Return waiting or serving entries of the provider for the service."""
        return [
            entry for entry in self.queue_entries
            if entry.is_active()
            and entry.provider_id == provider_id
            and entry.service_id == service_id
        ]

    def list_companies(self) -> List[Company]:
        return list(self.companies.values())
