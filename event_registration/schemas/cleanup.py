# event_registration/schemas/cleanup.py
from pydantic import BaseModel, Field
from typing import Dict, List


class CleanupSummary(BaseModel):
    success: bool
    # Only the categories that were requested and ran appear here.
    results: Dict[str, int] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)
