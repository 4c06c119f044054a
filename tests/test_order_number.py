"""
Tests for OrderNumberGenerator.
"""

import random
import re

from pos_api.services.domain.order_number import OrderNumberGenerator
from tests.conftest import FROZEN_NOW, FakeRedis


FALLBACK_PATTERN = re.compile(r"^ORD-20250115-400000-[0-9A-Z]{3}$")


def _generator(counter, **kwargs) -> OrderNumberGenerator:
    return OrderNumberGenerator(counter, clock=lambda: FROZEN_NOW, **kwargs)


class TestDailyCounter:
    """Numbers backed by the Redis counter."""

    def test_format(self):
        number = _generator(FakeRedis()).generate()
        assert number == "ORD-20250115-400000-001"

    def test_sequential_numbers_are_distinct(self):
        generator = _generator(FakeRedis())

        first = generator.generate()
        second = generator.generate()

        assert first.endswith("-001")
        assert second.endswith("-002")
        assert first != second

    def test_expiry_set_only_on_first_increment(self):
        redis = FakeRedis()
        generator = _generator(redis)

        generator.generate()
        generator.generate()

        assert redis.expire_calls == [("order_counter:20250115", 86400)]

    def test_counter_above_999_keeps_all_digits(self):
        redis = FakeRedis()
        redis.store["order_counter:20250115"] = "999"

        assert _generator(redis).generate().endswith("-1000")

    def test_unique_check_ignored_for_counter_numbers(self):
        calls = []

        _generator(FakeRedis()).generate(unique_check=lambda n: calls.append(n) or True)

        assert calls == []


class TestFallback:
    """Numbers generated while Redis is unavailable."""

    def test_random_suffix_when_counter_fails(self):
        redis = FakeRedis()
        redis.fail = True

        number = _generator(redis).generate()

        assert FALLBACK_PATTERN.match(number)

    def test_regenerates_when_number_is_taken(self):
        redis = FakeRedis()
        redis.fail = True
        seen = []

        def unique_check(number):
            seen.append(number)
            return len(seen) > 1

        number = _generator(redis, rng=random.Random(7)).generate(unique_check=unique_check)

        assert len(seen) == 2
        assert number == seen[-1]
        assert FALLBACK_PATTERN.match(number)

    def test_gives_up_after_bounded_attempts(self):
        redis = FakeRedis()
        redis.fail = True
        seen = []

        def never_unique(number):
            seen.append(number)
            return False

        number = _generator(redis, fallback_attempts=3).generate(unique_check=never_unique)

        assert len(seen) == 3
        assert FALLBACK_PATTERN.match(number)
