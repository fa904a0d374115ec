"""DynamoDB-backed stores for cached quote records and user favorites.

Quote table: partition key ``symbol``. Favorites table: partition key ``userId``,
sort key ``symbol``. Items use the camelCase field names of the API payloads;
numbers are stored as Decimal and timestamps as ISO-8601 strings.
"""

from __future__ import annotations

from typing import Any, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from app.errors import CacheReadFailed, CacheWriteFailed
from app.schemas.favorite import Favorite
from app.schemas.quote import QuoteRecord
from app.services.favorites import FavoriteStore
from app.services.quote_store import QuoteStore


def _table(table_name: str, region: str, table: Optional[Any]) -> Any:
    if table is not None:
        return table
    return boto3.resource("dynamodb", region_name=region).Table(table_name)


class DynamoQuoteStore(QuoteStore):
    def __init__(self, table_name: str, *, region: str = "us-east-1", table: Optional[Any] = None) -> None:
        self.table_name = table_name
        self._table = _table(table_name, region, table)

    def get(self, symbol: str) -> QuoteRecord | None:
        try:
            response = self._table.get_item(Key={"symbol": symbol})
        except (BotoCoreError, ClientError) as exc:
            raise CacheReadFailed(f"get_item failed for {symbol}: {exc}") from exc

        item = response.get("Item")
        if not item:
            return None
        try:
            return QuoteRecord.model_validate(item)
        except ValidationError as exc:
            raise CacheReadFailed(f"unreadable cache row for {symbol}: {exc}") from exc

    def put(self, record: QuoteRecord) -> None:
        try:
            self._table.put_item(Item=record.to_item())
        except (BotoCoreError, ClientError) as exc:
            raise CacheWriteFailed(f"put_item failed for {record.symbol}: {exc}") from exc


class DynamoFavoriteStore(FavoriteStore):
    def __init__(self, table_name: str, *, region: str = "us-east-1", table: Optional[Any] = None) -> None:
        self.table_name = table_name
        self._table = _table(table_name, region, table)

    def list_by_user(self, user_id: str) -> list[Favorite]:
        query: dict[str, Any] = {"KeyConditionExpression": Key("userId").eq(user_id)}
        favorites: list[Favorite] = []
        while True:
            response = self._table.query(**query)
            favorites.extend(Favorite.model_validate(item) for item in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return favorites
            query["ExclusiveStartKey"] = last_key

    def add(self, favorite: Favorite) -> None:
        item = favorite.model_dump(by_alias=True)
        item["createdAt"] = favorite.created_at.isoformat()
        self._table.put_item(Item=item)

    def remove(self, user_id: str, symbol: str) -> None:
        self._table.delete_item(Key={"userId": user_id, "symbol": symbol})
