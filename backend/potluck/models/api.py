from typing import List, Optional

from pydantic import BaseModel

from .shopping import LeafRef


class ToggleRequest(BaseModel):
    """Request body for checking/unchecking a shopping row"""
    row_key: str
    checked: bool
    person_id: Optional[int] = None  # None = everyone's list


class RetryRequest(BaseModel):
    """Request body for re-issuing the failed leaves of a toggle"""
    checked: bool
    refs: List[LeafRef]
