# event_registration/schemas/result.py
from pydantic import BaseModel
from typing import Any, Generic, Optional, TypeVar

DataT = TypeVar("DataT")


class ErrorDetail(BaseModel):
    code: str
    message: str


class OperationResult(BaseModel, Generic[DataT]):
    """Envelope returned by every mutating endpoint: ``{success, data | error}``."""
    success: bool
    data: Optional[DataT] = None
    error: Optional[ErrorDetail] = None

    @classmethod
    def ok(cls, data: Any) -> "OperationResult":
        return cls(success=True, data=data)
