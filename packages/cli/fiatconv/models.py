from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ConversionRequest(BaseModel):
    amount: float
    source: str
    target: str


class CurrencyPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    target: str


class RatesResponse(BaseModel):
    base: str
    rates: dict[str, float]
    date: str | None = None


class ErrorResponse(BaseModel):
    error: str = ""
