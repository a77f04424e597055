from typing import Literal

from pydantic import BaseModel


class StatItem(BaseModel):
    name: str
    value: str
    change: str
    # "negative" is part of the contract but nothing produces it yet
    change_type: Literal["positive", "neutral", "negative"]


class AdminStatsResponse(BaseModel):
    stats: list[StatItem]
