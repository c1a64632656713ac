"""Domain models for the S3 Excel → DynamoDB user loader."""

from .error_record import ErrorRecord
from .raw_row import COLUMNS, RawRow
from .run_result import BatchOutcome, BatchStatus, RunResult, RunStatus, RunSummary
from .user_record import UserRecord, WriteItem
from .validation import Invalid, Valid, ValidationOutcome

__all__ = [
    # Input
    "COLUMNS",
    "RawRow",
    # Validation
    "Valid",
    "Invalid",
    "ValidationOutcome",
    "UserRecord",
    "WriteItem",
    # Results
    "BatchOutcome",
    "BatchStatus",
    "RunResult",
    "RunStatus",
    "RunSummary",
    "ErrorRecord",
]
