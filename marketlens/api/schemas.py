"""Pydantic schemas for API requests and responses."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class HealthResponse(BaseModel):
    status: str = "ok"
    models: List[str] = Field(default_factory=list)


# Consistent shape for 4xx/5xx
class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human-readable message")


class MarketAnalysisRequest(BaseModel):
    """Body of POST /market-analysis.

    Every field is optional at the schema level so a missing title is
    reported as a 400 by the handler rather than a validation failure.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    market_title: Optional[str] = None
    market_id: Optional[str] = None
    yes_percentage: Optional[float] = None
    no_percentage: Optional[float] = None
    volume: Optional[Union[str, float]] = None
    outcomes: Optional[List[Dict[str, Any]]] = None

    @property
    def volume_text(self) -> Optional[str]:
        if self.volume is None:
            return None
        return str(self.volume)
