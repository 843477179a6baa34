from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class ToolIntent(str, Enum):
    lookup = "lookup"
    search = "search"
    analyze = "analyze"


class TrendPeriod(str, Enum):
    last_week = "last-week"
    last_month = "last-month"
    last_year = "last-year"


PERIOD_DAYS: Dict[TrendPeriod, int] = {
    TrendPeriod.last_week: 7,
    TrendPeriod.last_month: 30,
    TrendPeriod.last_year: 365,
}


class ToolSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    input_schema: Dict[str, Any]
    output_schema: Dict[str, Any]
    usage_guidance: Optional[str] = None
    error_action: str = "running tool"
    tool_intent: ToolIntent = ToolIntent.lookup


class ToolCall(BaseModel):
    tool_name: str
    input: Dict[str, Any]
    started_at: datetime
    finished_at: Optional[datetime] = None
    status: str
    text: str
    is_error: bool = False
    error_code: Optional[str] = None
    output: Dict[str, Any]
