from concurrent.futures import ThreadPoolExecutor

import pytest

from storefront.data.database import SessionLocal
from storefront.domain.errors import ConflictError, NotFoundError, ValidationError
from storefront.repos.cart_repo import CartRepo
from storefront.services.cart_service import CartService, collapse_items
from storefront.services.lock_service import LockService


@pytest.fixture()
def svc(db, lock_service):
    return CartService(db=db, lock_service=lock_service)


def quantities(cart):
    return {i["product_id"]: i["quantity"] for i in cart["items"]}


class TestMerge:
    def test_creates_cart_when_missing(self, svc):
        cart = svc.merge("u1", [{"product_id": "p1", "quantity": 2}], cart_id="c1")

        assert cart["cart_id"] == "c1"
        assert cart["user_id"] == "u1"
        assert cart["version"] == 1
        assert cart["items"] == [{"product_id": "p1", "quantity": 2}]

    def test_server_assigns_cart_id(self, svc):
        cart = svc.merge("u1", [{"product_id": "p1", "quantity": 1}])
        assert cart["cart_id"]

    def test_same_items_twice_is_idempotent(self, svc):
        items = [{"product_id": "p1", "quantity": 2}, {"product_id": "p2", "quantity": 1}]
        first = svc.merge("u1", items, cart_id="c1")
        second = svc.merge("u1", items, cart_id="c1")

        assert second["items"] == first["items"]

    def test_overwrites_instead_of_accumulating(self, svc):
        svc.merge("u1", [{"product_id": "p1", "quantity": 3}])
        cart = svc.merge("u1", [{"product_id": "p1", "quantity": 5}])

        assert quantities(cart) == {"p1": 5}

    def test_keeps_untouched_items_and_appends_new(self, svc):
        svc.merge("u1", [{"product_id": "p1", "quantity": 1}, {"product_id": "p2", "quantity": 2}])
        cart = svc.merge("u1", [{"product_id": "p3", "quantity": 4}, {"product_id": "p1", "quantity": 7}])

        assert [i["product_id"] for i in cart["items"]] == ["p1", "p2", "p3"]
        assert quantities(cart) == {"p1": 7, "p2": 2, "p3": 4}

    def test_each_write_bumps_version(self, svc):
        svc.merge("u1", [{"product_id": "p1", "quantity": 1}])
        cart = svc.merge("u1", [{"product_id": "p1", "quantity": 2}])
        assert cart["version"] == 2

    def test_incoming_cart_id_ignored_for_existing_cart(self, svc):
        svc.merge("u1", [{"product_id": "p1", "quantity": 1}], cart_id="c1")
        cart = svc.merge("u1", [{"product_id": "p2", "quantity": 1}], cart_id="other")
        assert cart["cart_id"] == "c1"

    def test_cart_id_of_another_user_is_conflict(self, svc):
        svc.merge("u1", [{"product_id": "p1", "quantity": 1}], cart_id="c1")
        with pytest.raises(ConflictError):
            svc.merge("u2", [{"product_id": "p1", "quantity": 1}], cart_id="c1")

    def test_rejects_non_positive_quantity(self, svc):
        with pytest.raises(ValidationError) as exc:
            svc.merge("u1", [{"product_id": "p1", "quantity": 0}])
        assert "items.0.quantity" in exc.value.details

    def test_retries_after_version_conflict(self, svc, monkeypatch):
        svc.merge("u1", [{"product_id": "p1", "quantity": 1}])

        real_bump = CartRepo.bump_version
        calls = []

        def flaky_bump(self, cart_pk, old_version):
            calls.append(old_version)
            if len(calls) == 1:
                return 0
            return real_bump(self, cart_pk, old_version)

        monkeypatch.setattr(CartRepo, "bump_version", flaky_bump)
        cart = svc.merge("u1", [{"product_id": "p1", "quantity": 9}])

        assert len(calls) == 2
        assert quantities(cart) == {"p1": 9}
        assert cart["version"] == 2


class TestCollapseItems:
    def test_last_duplicate_wins(self):
        assert collapse_items(
            [{"productId": "p1", "quantity": 1}, {"product_id": "p1", "quantity": 4}]
        ) == {"p1": 4}

    def test_missing_product_id(self):
        with pytest.raises(ValidationError):
            collapse_items([{"quantity": 1}])

    def test_bool_is_not_a_quantity(self):
        with pytest.raises(ValidationError):
            collapse_items([{"product_id": "p1", "quantity": True}])


class TestUpdateQuantity:
    def test_sets_quantity(self, svc):
        svc.merge("u1", [{"product_id": "p1", "quantity": 2}])
        cart = svc.update_quantity("u1", "p1", 5)
        assert quantities(cart) == {"p1": 5}

    def test_missing_cart(self, svc):
        with pytest.raises(NotFoundError):
            svc.update_quantity("nobody", "p1", 5)

    def test_missing_line(self, svc):
        svc.merge("u1", [{"product_id": "p1", "quantity": 2}])
        with pytest.raises(NotFoundError) as exc:
            svc.update_quantity("u1", "p9", 5)
        assert exc.value.details == {"productId": "p9"}

    def test_rejects_zero(self, svc):
        with pytest.raises(ValidationError):
            svc.update_quantity("u1", "p1", 0)


class TestRemoveAndDelete:
    def test_remove_existing_line(self, svc):
        svc.merge("u1", [{"product_id": "p1", "quantity": 2}, {"product_id": "p2", "quantity": 1}])

        assert svc.remove("u1", "p1") is True
        assert quantities(svc.get_by_user("u1")) == {"p2": 1}

    def test_remove_unknown_product_is_noop(self, svc):
        before = svc.merge("u1", [{"product_id": "p1", "quantity": 2}])

        assert svc.remove("u1", "nonexistent-product") is False

        after = svc.get_by_user("u1")
        assert after["items"] == before["items"]
        assert after["version"] == before["version"]

    def test_remove_without_cart_is_noop(self, svc):
        assert svc.remove("nobody", "p1") is False

    def test_delete_cart(self, svc):
        svc.merge("u1", [{"product_id": "p1", "quantity": 2}])
        svc.delete("u1")
        with pytest.raises(NotFoundError):
            svc.get_by_user("u1")

    def test_delete_missing_cart(self, svc):
        with pytest.raises(NotFoundError):
            svc.delete("nobody")


class TestQueries:
    def test_get_by_cart_id(self, svc):
        svc.merge("u1", [{"product_id": "p1", "quantity": 2}], cart_id="c1")
        assert svc.get_by_cart_id("c1")["user_id"] == "u1"

    def test_get_cart_needs_a_key(self, svc):
        with pytest.raises(ValidationError) as exc:
            svc.get_cart()
        assert set(exc.value.details) == {"userId", "cartId"}

    def test_get_cart_unknown_cart_id(self, svc):
        with pytest.raises(NotFoundError):
            svc.get_cart(cart_id="missing")


class TestSerialization:
    def test_busy_lock_is_conflict(self, db, redis_client):
        redis_client.set(LockService.cart_key("u1"), "someone-else", ex=30)
        svc = CartService(db=db, lock_service=LockService(client=redis_client, wait=0.1))

        with pytest.raises(ConflictError):
            svc.merge("u1", [{"product_id": "p1", "quantity": 1}])

        # the foreign lock is left alone
        assert redis_client.get(LockService.cart_key("u1")) == "someone-else"

    def test_lock_released_after_failure(self, svc, redis_client):
        with pytest.raises(NotFoundError):
            svc.update_quantity("u1", "p1", 3)
        assert redis_client.get(LockService.cart_key("u1")) is None

    def test_concurrent_merges_lose_nothing(self, redis_client):
        def add(product_id):
            db = SessionLocal()
            try:
                svc = CartService(db=db, lock_service=LockService(client=redis_client, wait=10))
                svc.merge("u1", [{"product_id": product_id, "quantity": 1}], cart_id="c1")
            finally:
                db.close()

        products = [f"p{i}" for i in range(6)]
        with ThreadPoolExecutor(max_workers=6) as pool:
            list(pool.map(add, products))

        db = SessionLocal()
        try:
            cart = CartService(db=db, lock_service=LockService(client=redis_client)).get_by_user("u1")
        finally:
            db.close()

        assert sorted(quantities(cart)) == sorted(products)
        assert cart["version"] == len(products)
