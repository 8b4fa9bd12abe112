# apps/availabilityapp/services/batch.py
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


@dataclass
class BatchItem:
    date: date
    availability_id: Optional[str] = None
    created: bool = True


@dataclass
class BatchFailure:
    date: date
    code: str
    error: str


@dataclass
class BatchResult:
    """
    Outcome of a best-effort batch over dates.

    Items are committed one by one; a failed item never rolls back the
    items processed before it.
    """

    processed: List[BatchItem] = field(default_factory=list)
    failed: List[BatchFailure] = field(default_factory=list)

    def add_success(self, day: date, availability_id=None, created=True):
        self.processed.append(
            BatchItem(
                date=day,
                availability_id=str(availability_id) if availability_id else None,
                created=created,
            )
        )

    def add_failure(self, day: date, code, error):
        self.failed.append(BatchFailure(date=day, code=getattr(code, "value", code), error=str(error)))

    @property
    def success(self) -> bool:
        return not self.failed

    def as_dict(self):
        return {
            "success": self.success,
            "processed": len(self.processed),
            "failed": len(self.failed),
            "processed_dates": [
                {
                    "date": item.date.isoformat(),
                    "availability_id": item.availability_id,
                    "created": item.created,
                }
                for item in self.processed
            ],
            "failed_dates": [
                {"date": item.date.isoformat(), "code": item.code, "error": item.error}
                for item in self.failed
            ],
        }
