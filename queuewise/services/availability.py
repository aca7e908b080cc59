"""
Application services for appointment slots and queue estimates.

The service fetches a snapshot of the relevant records through a booking
store adapter and delegates the calculation to the domain-level
``SlotGenerator`` and ``QueueEstimator``. The store dependency is a simple
protocol so tests can plug in a stub.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence, Tuple

import pendulum
from pendulum import DateTime

from ..domain.models import (
    AvailableSlot,
    Booking,
    Company,
    Provider,
    QueueEntry,
    QueueEstimate,
    Service,
    WeeklyHours,
)
from ..domain.queue_estimator import QueueEstimator
from ..domain.slot_generator import SlotGenerator
from ..domain.working_hours import day_range, parse_working_hours

logger = logging.getLogger(__name__)


class BookingStoreProtocol(Protocol):
    """Protocol describing the data store behaviour needed by the service."""

    async def get_company(self, company_id: str) -> Company:
        """Return the company or raise ``RecordNotFoundError``."""

    async def get_service(self, service_id: str) -> Service:
        """Return the service or raise ``RecordNotFoundError``."""

    async def get_provider(self, provider_id: str) -> Provider:
        """Return the provider or raise ``RecordNotFoundError``."""

    async def get_confirmed_bookings(
        self,
        provider_id: str,
        start_time: DateTime,
        end_time: DateTime,
    ) -> List[Booking]:
        """Return confirmed bookings of the provider overlapping the range."""

    async def get_active_queue_entries(
        self,
        service_id: str,
        provider_id: str,
    ) -> List[QueueEntry]:
        """Return waiting or serving queue entries for the provider."""


class AvailabilityService:
    """
    Orchestrates record retrieval and availability calculation.

    Every call works on a fresh snapshot; nothing is cached between calls,
    so callers showing a queue estimate simply call again to refresh it.
    """

    def __init__(
        self,
        store: BookingStoreProtocol,
        slot_generator: SlotGenerator,
        queue_estimator: QueueEstimator,
        timezone: str = "Europe/Berlin",
    ) -> None:
        self._store = store
        self._slot_generator = slot_generator
        self._queue_estimator = queue_estimator
        self._timezone = timezone

    async def available_slots(
        self,
        *,
        service_id: str,
        provider_id: str,
        target_date: DateTime,
        now: Optional[DateTime] = None,
    ) -> List[AvailableSlot]:
        """Return the bookable slots for the provider on ``target_date``."""
        company, service, provider = await self._load_context(service_id, provider_id)
        day = day_range(target_date)

        bookings = await self._store.get_confirmed_bookings(
            provider_id=provider.id,
            start_time=day.start,
            end_time=day.end,
        )

        return self._slot_generator.generate_slots(
            company,
            service,
            provider,
            target_date,
            bookings,
            now=now or self._now(),
        )

    async def estimate_queue(
        self,
        *,
        service_id: str,
        provider_id: str,
        now: Optional[DateTime] = None,
    ) -> QueueEstimate:
        """Return position and estimated start for someone joining the queue now."""
        now = now or self._now()
        company, service, provider = await self._load_context(service_id, provider_id)
        today = day_range(now)

        bookings = await self._store.get_confirmed_bookings(
            provider_id=provider.id,
            start_time=today.start,
            end_time=today.end,
        )
        entries = await self._store.get_active_queue_entries(
            service_id=service.id,
            provider_id=provider.id,
        )

        return self._queue_estimator.estimate(
            company,
            service,
            provider,
            bookings,
            self._in_service_order(entries),
            now=now,
        )

    async def free_from(
        self,
        *,
        provider_id: str,
        now: Optional[DateTime] = None,
    ) -> Optional[DateTime]:
        """
        Return when the provider is through with today's reservations.

        None when the provider's company is closed today.
        """
        now = now or self._now()
        provider = await self._store.get_provider(provider_id)
        company = await self._store.get_company(provider.company_id)
        today = day_range(now)

        bookings = await self._store.get_confirmed_bookings(
            provider_id=provider.id,
            start_time=today.start,
            end_time=today.end,
        )

        return self._queue_estimator.latest_available_time(company, provider, bookings, now=now)

    async def weekly_hours(self, company_id: str) -> WeeklyHours:
        """Return the parsed operating hours of a company."""
        company = await self._store.get_company(company_id)
        return parse_working_hours(company.working_hours)

    async def _load_context(
        self,
        service_id: str,
        provider_id: str,
    ) -> Tuple[Company, Service, Provider]:
        service = await self._store.get_service(service_id)
        provider = await self._store.get_provider(provider_id)
        company = await self._store.get_company(service.company_id)

        if provider.company_id and provider.company_id != company.id:
            logger.warning(
                "Provider %s belongs to company %s, not %s",
                provider.id, provider.company_id, company.id
            )

        return company, service, provider

    def _now(self) -> DateTime:
        return pendulum.now(self._timezone)

    @staticmethod
    def _in_service_order(entries: Sequence[QueueEntry]) -> List[QueueEntry]:
        """
        Order queue entries by position, keeping the store's order for ties.

        Entries without a position go last.
        """
        return sorted(
            entries,
            key=lambda entry: (entry.position is None, entry.position or 0),
        )
