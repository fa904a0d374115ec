from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FavoriteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbol: str | None = None
    company_name: str | None = Field(default=None, alias="companyName")


class Favorite(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(alias="userId")
    symbol: str
    company_name: str = Field(default="", alias="companyName")
    created_at: datetime = Field(alias="createdAt")

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("company_name", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or ""
