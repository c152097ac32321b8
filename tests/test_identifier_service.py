import re
from concurrent.futures import ThreadPoolExecutor

import pytest

from storefront.data.database import SessionLocal
from storefront.domain.code_spaces import (
    ORDER_ID,
    PRODUCT_ID,
    SELLER_ID,
    TRACKING_ID,
    NumericCodeSpace,
)
from storefront.domain.errors import ConflictError, ResourceExhaustedError
from storefront.services.identifier_service import IdentifierGenerator


class ScriptedRng:
    """Returns the given numbers in order from randint."""

    def __init__(self, values):
        self.values = iter(values)
        self.calls = 0

    def randint(self, low, high):
        self.calls += 1
        return next(self.values)


class TestCodeShapes:
    def test_order_id_is_six_digits(self, generator):
        assert re.fullmatch(r"[1-9]\d{5}", generator.allocate(ORDER_ID))

    def test_product_id_is_six_digits(self, generator):
        assert re.fullmatch(r"[1-9]\d{5}", generator.allocate(PRODUCT_ID))

    def test_tracking_id_is_twelve_uppercase_alphanumerics(self, generator):
        assert re.fullmatch(r"[A-Z0-9]{12}", generator.allocate(TRACKING_ID))

    def test_seller_id_is_prefixed(self, generator):
        assert re.fullmatch(r"MBSLR[1-9]\d{4}", generator.allocate(SELLER_ID))

    def test_capacities(self):
        assert ORDER_ID.capacity == 900_000
        assert SELLER_ID.capacity == 90_000
        assert TRACKING_ID.capacity == 36 ** 12


class TestCollisions:
    def test_retries_after_collision(self):
        rng = ScriptedRng([123456, 123456, 654321])
        gen = IdentifierGenerator(session_factory=SessionLocal, rng=rng)

        assert gen.allocate(ORDER_ID) == "123456"
        assert gen.allocate(ORDER_ID) == "654321"
        assert rng.calls == 3

    def test_same_code_is_fine_for_another_kind(self):
        gen = IdentifierGenerator(session_factory=SessionLocal, rng=ScriptedRng([111111, 111111]))

        assert gen.allocate(ORDER_ID) == "111111"
        assert gen.allocate(PRODUCT_ID) == "111111"

    def test_gives_up_after_max_attempts(self):
        gen = IdentifierGenerator(session_factory=SessionLocal, rng=ScriptedRng([222222] * 10), max_attempts=3)
        gen.allocate(ORDER_ID)

        with pytest.raises(ConflictError) as exc:
            gen.allocate(ORDER_ID)

        assert not isinstance(exc.value, ResourceExhaustedError)
        assert gen.reserved_count("order") == 1

    def test_exhausted_space_fails_instead_of_looping(self):
        tiny = NumericCodeSpace(kind="tiny", digits=1)
        gen = IdentifierGenerator(session_factory=SessionLocal, max_attempts=500)

        codes = {gen.allocate(tiny) for _ in range(tiny.capacity)}
        assert codes == {str(d) for d in range(1, 10)}

        with pytest.raises(ResourceExhaustedError):
            gen.allocate(tiny)

    def test_register_existing_skips_known_codes(self):
        gen = IdentifierGenerator(session_factory=SessionLocal, rng=ScriptedRng([100001, 100002]))

        assert gen.register_existing(PRODUCT_ID, ["100001", "100001"]) == 1
        assert gen.allocate(PRODUCT_ID) == "100002"


class TestConcurrency:
    def test_concurrent_allocations_are_distinct(self):
        space = NumericCodeSpace(kind="race", digits=2)
        gen = IdentifierGenerator(session_factory=SessionLocal, max_attempts=500)

        with ThreadPoolExecutor(max_workers=8) as pool:
            codes = list(pool.map(lambda _: gen.allocate(space), range(40)))

        assert len(codes) == 40
        assert len(set(codes)) == 40
        assert gen.reserved_count("race") == 40


class TestLegacyCodes:
    def test_codes_outside_the_space_are_not_reserved(self):
        gen = IdentifierGenerator(session_factory=SessionLocal)

        assert gen.register_existing(PRODUCT_ID, ["SKU-7", "012345", "1234567", "123456"]) == 1
        assert gen.reserved_count("product") == 1

    def test_legacy_codes_do_not_exhaust_a_small_space(self):
        tiny = NumericCodeSpace(kind="tiny", digits=1)
        gen = IdentifierGenerator(session_factory=SessionLocal, rng=ScriptedRng([1, 1, 2]), max_attempts=5)
        gen.register_existing(tiny, [f"legacy-{i}" for i in range(20)])

        assert gen.allocate(tiny) == "1"
        assert gen.allocate(tiny) == "2"

    @pytest.mark.parametrize(
        "space, code, expected",
        [
            (SELLER_ID, "MBSLR12345", True),
            (SELLER_ID, "12345", False),
            (SELLER_ID, "MBSLR01234", False),
            (TRACKING_ID, "ABCDEF123456", True),
            (TRACKING_ID, "abcdef123456", False),
            (ORDER_ID, "99999", False),
        ],
    )
    def test_contains(self, space, code, expected):
        assert space.contains(code) is expected
