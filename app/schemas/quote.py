from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator


class QuoteRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    symbol: str
    price: Decimal = Decimal(0)
    change: Decimal = Decimal(0)
    change_percent: str = Field(default="0%", alias="changePercent")
    company_name: str = Field(default="", alias="companyName")
    industry: str = ""
    description: str = ""
    pe_ratio: Decimal = Field(
        default=Decimal(0),
        validation_alias=AliasChoices("peRatio", "pe", "pe_ratio"),
        serialization_alias="peRatio",
    )
    market_cap: str = Field(default="0", alias="marketCap")
    last_updated: datetime = Field(alias="lastUpdated")

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("company_name", "industry", "description", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("market_cap", mode="before")
    @classmethod
    def market_cap_as_text(cls, value: Any) -> Any:
        if value is None or value == "":
            return "0"
        return str(value)

    @field_validator("last_updated")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # rows written without an offset were produced in UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_serializer("price", "change", "pe_ratio", when_used="json")
    def decimal_as_number(self, value: Decimal) -> float:
        return float(value)

    def to_item(self) -> dict[str, Any]:
        """Flat mapping with the persisted field names; timestamps as ISO-8601."""
        item = self.model_dump(by_alias=True)
        item["lastUpdated"] = self.last_updated.isoformat()
        return item


class RawQuote(BaseModel):
    """Loosely shaped quote payload; every field is optional."""

    model_config = ConfigDict(extra="ignore")

    price: Any = Field(default=None, validation_alias=AliasChoices("05. price", "price"))
    change: Any = Field(default=None, validation_alias=AliasChoices("09. change", "change"))
    change_percent: Any = Field(
        default=None,
        validation_alias=AliasChoices("10. change percent", "changePercent", "change_percent"),
    )


class RawOverview(BaseModel):
    """Loosely shaped company overview payload; every field is optional."""

    model_config = ConfigDict(extra="ignore")

    name: Any = Field(default=None, validation_alias=AliasChoices("Name", "companyName", "name"))
    industry: Any = Field(default=None, validation_alias=AliasChoices("Industry", "industry"))
    description: Any = Field(
        default=None, validation_alias=AliasChoices("Description", "description")
    )
    pe_ratio: Any = Field(default=None, validation_alias=AliasChoices("PERatio", "peRatio", "pe"))
    market_cap: Any = Field(
        default=None, validation_alias=AliasChoices("MarketCapitalization", "marketCap")
    )
