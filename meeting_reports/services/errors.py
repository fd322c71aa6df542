# meeting_reports/services/errors.py
from __future__ import annotations


class ReportValidationError(ValueError):
    """
    Raised when the reporting window is missing a bound or is inverted.
    """


class FetchError(RuntimeError):
    """
    Raised when a collection required by a report (meetings, staff, or a
    single meeting's members) cannot be retrieved from the portal.
    """

    def __init__(self, entity: str, message: str) -> None:
        super().__init__(f"Failed to fetch {entity}: {message}")
        self.entity = entity


class PartialFetchError(FetchError):
    """
    One meeting's participation list could not be retrieved during the
    attendance join. Recovered locally; never propagated out of the engine.
    """

    def __init__(self, meeting_id: str, message: str) -> None:
        super().__init__(f"members of meeting {meeting_id}", message)
        self.meeting_id = meeting_id


class ReportInProgressError(RuntimeError):
    """
    Returned when generate_report() is invoked while a report is loading.
    """


class ExportError(RuntimeError):
    """
    Raised when a report projection cannot be serialized to a file.
    """
