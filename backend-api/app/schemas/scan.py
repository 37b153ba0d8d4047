from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union


class MatchItem(BaseModel):
    id: Union[str, int]
    title: Optional[str] = None
    price: Optional[Union[str, float]] = None
    store: Optional[str] = None
    url: Optional[str] = None
    image: Optional[str] = None
    match: Optional[float] = None


class ScanResponse(BaseModel):
    matches: List[MatchItem] = Field(default_factory=list)
    note: Optional[str] = None
    debug: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
