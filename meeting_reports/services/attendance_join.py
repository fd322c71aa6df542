# meeting_reports/services/attendance_join.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Protocol, Sequence

from meeting_reports.schemas.meeting import Meeting, ParticipationRecord
from meeting_reports.services.errors import FetchError, PartialFetchError
from meeting_reports.services.repositories import ParticipationRepository

logger = logging.getLogger(__name__)


@dataclass
class JoinResult:
    """
    Participation lists keyed by meeting id, plus the meetings whose list
    could not be fetched. Failed meetings are absent from `participation`.
    """

    participation: Dict[str, List[ParticipationRecord]] = field(default_factory=dict)
    failures: List[PartialFetchError] = field(default_factory=list)


class ParticipationJoin(Protocol):
    name: str

    async def fetch_all(self, meetings: Sequence[Meeting]) -> JoinResult:
        ...


async def _fetch_one(
    repository: ParticipationRepository,
    meeting: Meeting,
) -> List[ParticipationRecord] | PartialFetchError:
    try:
        return await repository.fetch_for_meeting(meeting.id)
    except FetchError as exc:
        logger.warning(
            "Participation fetch failed for meeting %s (%s); counting it as empty",
            meeting.id,
            exc,
        )
        return PartialFetchError(meeting.id, str(exc))


def _collect(meetings: Sequence[Meeting], outcomes: Sequence) -> JoinResult:
    result = JoinResult()
    for meeting, outcome in zip(meetings, outcomes):
        if isinstance(outcome, PartialFetchError):
            result.failures.append(outcome)
        else:
            result.participation[meeting.id] = outcome
    return result


class SequentialJoin:
    """
    Fetches each meeting's member list one at a time, in meeting order.
    """

    name = "sequential"

    def __init__(self, repository: ParticipationRepository) -> None:
        self.repository = repository

    async def fetch_all(self, meetings: Sequence[Meeting]) -> JoinResult:
        outcomes = []
        for meeting in meetings:
            outcomes.append(await _fetch_one(self.repository, meeting))
        return _collect(meetings, outcomes)


class ConcurrentJoin:
    """
    Fetches member lists with at most `limit` requests in flight.

    Outcomes are matched back to meetings by position, so the result does not
    depend on the order in which requests complete.
    """

    name = "concurrent"

    def __init__(self, repository: ParticipationRepository, limit: int = 5) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.repository = repository
        self.limit = limit

    async def fetch_all(self, meetings: Sequence[Meeting]) -> JoinResult:
        semaphore = asyncio.Semaphore(self.limit)

        async def guarded(meeting: Meeting):
            async with semaphore:
                return await _fetch_one(self.repository, meeting)

        outcomes = await asyncio.gather(*(guarded(m) for m in meetings))
        return _collect(meetings, outcomes)


def build_join(
    strategy: str,
    repository: ParticipationRepository,
    fanout_limit: int = 5,
) -> ParticipationJoin:
    if strategy == SequentialJoin.name:
        return SequentialJoin(repository)
    if strategy == ConcurrentJoin.name:
        return ConcurrentJoin(repository, limit=fanout_limit)
    raise ValueError(f"Unknown attendance join strategy: {strategy!r}")
