"""Seed a quote table with sample records.

Usage: python scripts/seed_quotes.py <stocks-table-name> [--region us-east-1]
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from app.integrations.dynamodb import DynamoQuoteStore
from app.schemas.quote import QuoteRecord
from app.services.quote_aggregator import utcnow
from app.services.quote_store import QuoteStore

SAMPLE_QUOTES = [
    {"symbol": "AAPL", "companyName": "Apple Inc.", "price": "182.63", "change": "2.15",
     "changePercent": "1.19%", "industry": "Technology", "marketCap": "2870000000000"},
    {"symbol": "MSFT", "companyName": "Microsoft Corporation", "price": "378.92", "change": "5.23",
     "changePercent": "1.40%", "industry": "Technology", "marketCap": "2820000000000"},
    {"symbol": "GOOGL", "companyName": "Alphabet Inc.", "price": "142.89", "change": "1.05",
     "changePercent": "0.74%", "industry": "Technology", "marketCap": "1790000000000"},
    {"symbol": "AMZN", "companyName": "Amazon.com, Inc.", "price": "174.42", "change": "-0.24",
     "changePercent": "-0.14%", "industry": "Consumer Cyclical", "marketCap": "1800000000000"},
    {"symbol": "TSLA", "companyName": "Tesla, Inc.", "price": "175.34", "change": "3.84",
     "changePercent": "2.24%", "industry": "Automotive", "marketCap": "560000000000"},
]


def seed(store: QuoteStore) -> int:
    now = utcnow()
    seeded = 0
    for row in SAMPLE_QUOTES:
        record = QuoteRecord.model_validate({**row, "lastUpdated": now})
        try:
            store.put(record)
        except Exception as exc:
            print(f"[SEED][seed_failed] symbol={record.symbol} error={exc}", flush=True)
            continue
        seeded += 1
        print(f"[SEED][seeded] symbol={record.symbol} company={record.company_name}", flush=True)
    return seeded


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed a DynamoDB quote table with sample records.")
    parser.add_argument("table_name")
    parser.add_argument("--region", default="us-east-1")
    args = parser.parse_args(argv)

    store = DynamoQuoteStore(args.table_name, region=args.region)
    seeded = seed(store)
    print(f"[SEED][complete] table={args.table_name} seeded={seeded}/{len(SAMPLE_QUOTES)}", flush=True)
    return 0 if seeded == len(SAMPLE_QUOTES) else 1


if __name__ == "__main__":
    sys.exit(main())
