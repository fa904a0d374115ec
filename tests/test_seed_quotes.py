import unittest
from decimal import Decimal

from app.errors import CacheWriteFailed
from app.services.quote_store import InMemoryQuoteStore
from scripts.seed_quotes import SAMPLE_QUOTES, seed


class FlakyStore(InMemoryQuoteStore):
    def put(self, record):
        if record.symbol == "TSLA":
            raise CacheWriteFailed("AccessDeniedException")
        super().put(record)


class SeedQuotesTest(unittest.TestCase):
    def test_seed_writes_every_sample(self):
        store = InMemoryQuoteStore()

        seeded = seed(store)

        self.assertEqual(seeded, len(SAMPLE_QUOTES))
        self.assertEqual(len(store.list_all()), len(SAMPLE_QUOTES))
        apple = store.get("AAPL")
        self.assertEqual(apple.price, Decimal("182.63"))
        self.assertEqual(apple.company_name, "Apple Inc.")

    def test_seed_continues_after_a_failed_write(self):
        store = FlakyStore()

        seeded = seed(store)

        self.assertEqual(seeded, len(SAMPLE_QUOTES) - 1)
        self.assertIsNone(store.get("TSLA"))
        self.assertIsNotNone(store.get("AMZN"))


if __name__ == "__main__":
    unittest.main()
