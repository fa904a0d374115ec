import unittest
from datetime import datetime, timezone
from decimal import Decimal

from app.schemas.quote import QuoteRecord, RawQuote
from app.services.quote_aggregator import QuoteAggregator

NOW = datetime(2026, 1, 2, 15, 0, tzinfo=timezone.utc)


class QuoteAggregatorTest(unittest.TestCase):
    def setUp(self):
        self.aggregator = QuoteAggregator(clock=lambda: NOW)

    def test_quote_only_merge_yields_partial_record(self):
        record = self.aggregator.merge(
            "XYZ",
            {"price": "182.63", "change": "2.15", "10. change percent": "1.19%"},
            None,
        )

        self.assertEqual(record.symbol, "XYZ")
        self.assertEqual(record.price, Decimal("182.63"))
        self.assertEqual(record.change, Decimal("2.15"))
        self.assertEqual(record.change_percent, "1.19%")
        self.assertEqual(record.company_name, "")
        self.assertEqual(record.industry, "")
        self.assertEqual(record.description, "")
        self.assertEqual(record.pe_ratio, Decimal(0))
        self.assertEqual(record.market_cap, "0")
        self.assertEqual(record.last_updated, NOW)

    def test_provider_keys_and_overview_produce_full_record(self):
        record = self.aggregator.merge(
            "AAPL",
            {"05. price": "182.6300", "09. change": "-0.2400", "10. change percent": "-0.14%"},
            {
                "Name": "Apple Inc",
                "Industry": "ELECTRONIC COMPUTERS",
                "Description": "Designs consumer electronics.",
                "PERatio": "29.4",
                "MarketCapitalization": "2870000000000",
            },
        )

        self.assertEqual(record.price, Decimal("182.6300"))
        self.assertEqual(record.change, Decimal("-0.2400"))
        self.assertEqual(record.change_percent, "-0.14%")
        self.assertEqual(record.company_name, "Apple Inc")
        self.assertEqual(record.industry, "ELECTRONIC COMPUTERS")
        self.assertEqual(record.description, "Designs consumer electronics.")
        self.assertEqual(record.pe_ratio, Decimal("29.4"))
        self.assertEqual(record.market_cap, "2870000000000")

    def test_non_numeric_price_defaults_to_zero(self):
        record = self.aggregator.merge("XYZ", {"05. price": "N/A", "09. change": "1.5"}, None)

        self.assertEqual(record.price, Decimal(0))
        self.assertEqual(record.change, Decimal("1.5"))
        self.assertEqual(self.aggregator.defaulted_count, 1)

    def test_nan_and_infinity_are_not_accepted_as_numbers(self):
        record = self.aggregator.merge("XYZ", {"price": "NaN", "change": "Infinity"}, None)

        self.assertEqual(record.price, Decimal(0))
        self.assertEqual(record.change, Decimal(0))
        self.assertEqual(self.aggregator.defaulted_count, 2)

    def test_missing_fields_default_without_counting_degradation(self):
        record = self.aggregator.merge("XYZ", {}, None)

        self.assertEqual(record.price, Decimal(0))
        self.assertEqual(record.change, Decimal(0))
        self.assertEqual(record.change_percent, "0%")
        self.assertEqual(self.aggregator.defaulted_count, 0)

    def test_empty_change_percent_defaults(self):
        record = self.aggregator.merge("XYZ", {"price": "1", "10. change percent": ""}, None)

        self.assertEqual(record.change_percent, "0%")

    def test_overview_with_missing_fields_defaults_individually(self):
        record = self.aggregator.merge(
            "XYZ",
            {"price": "10"},
            {"Name": "Xyz Corp", "PERatio": "None"},
        )

        self.assertEqual(record.company_name, "Xyz Corp")
        self.assertEqual(record.industry, "")
        self.assertEqual(record.description, "")
        self.assertEqual(record.pe_ratio, Decimal(0))
        self.assertEqual(record.market_cap, "0")
        self.assertEqual(self.aggregator.defaulted_count, 1)

    def test_market_cap_is_kept_verbatim(self):
        record = self.aggregator.merge(
            "BRK.A", {"price": "600000"}, {"MarketCapitalization": "98765432109876543210"}
        )

        self.assertEqual(record.market_cap, "98765432109876543210")

    def test_non_mapping_payload_degrades_to_defaults(self):
        record = self.aggregator.merge("XYZ", None, ["unexpected"])

        self.assertEqual(record.price, Decimal(0))
        self.assertEqual(record.company_name, "")

    def test_numeric_payload_values_are_accepted(self):
        record = self.aggregator.merge("XYZ", RawQuote(price=12.5, change=-1), None)

        self.assertEqual(record.price, Decimal("12.5"))
        self.assertEqual(record.change, Decimal("-1"))

    def test_explicit_merge_time_overrides_clock(self):
        at = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        record = self.aggregator.merge("XYZ", {"price": "1"}, None, now=at)

        self.assertEqual(record.last_updated, at)

    def test_json_rendering_uses_wire_names_and_numbers(self):
        record = self.aggregator.merge(
            "XYZ", {"price": "182.63", "change": "2.15", "10. change percent": "1.19%"}, None
        )

        body = record.model_dump(mode="json", by_alias=True)

        self.assertEqual(body["price"], 182.63)
        self.assertEqual(body["change"], 2.15)
        self.assertEqual(body["changePercent"], "1.19%")
        self.assertEqual(body["companyName"], "")
        self.assertEqual(body["peRatio"], 0.0)
        self.assertEqual(body["marketCap"], "0")
        self.assertEqual(body["lastUpdated"], "2026-01-02T15:00:00Z")


class QuoteRecordShapeTest(unittest.TestCase):
    def test_stored_row_with_extra_and_missing_fields_is_readable(self):
        record = QuoteRecord.model_validate(
            {
                "symbol": "aapl",
                "price": Decimal("182.63"),
                "changePercent": "1.19%",
                "pe": Decimal("29.4"),
                "legacyField": "ignored",
                "lastUpdated": "2026-01-02T15:00:00",
            }
        )

        self.assertEqual(record.symbol, "AAPL")
        self.assertEqual(record.change, Decimal(0))
        self.assertEqual(record.pe_ratio, Decimal("29.4"))
        self.assertEqual(record.company_name, "")
        self.assertEqual(record.last_updated, datetime(2026, 1, 2, 15, 0, tzinfo=timezone.utc))

    def test_to_item_uses_persisted_field_names(self):
        record = QuoteRecord(symbol="AAPL", price=Decimal("1.5"), last_updated=datetime(2026, 1, 2, tzinfo=timezone.utc))

        item = record.to_item()

        self.assertEqual(
            set(item),
            {
                "symbol",
                "price",
                "change",
                "changePercent",
                "companyName",
                "industry",
                "description",
                "peRatio",
                "marketCap",
                "lastUpdated",
            },
        )
        self.assertEqual(item["price"], Decimal("1.5"))
        self.assertEqual(item["lastUpdated"], "2026-01-02T00:00:00+00:00")


if __name__ == "__main__":
    unittest.main()
