import re
from decimal import Decimal

import pytest

from storefront.data.models.product import ProductModel
from storefront.domain.errors import ConflictError, NotFoundError, ValidationError
from storefront.services.coupon_service import CouponService
from storefront.services.product_service import ProductService


class TestCouponService:
    @pytest.fixture()
    def svc(self, db, notifications):
        return CouponService(db, notification_service=notifications)

    def test_save_queues_announcement(self, svc, queued):
        result = svc.save_coupon("SAVE10", 10)

        assert result == {"coupon": {"code": "SAVE10", "discount_percentage": 10}, "broadcast_queued": True}
        subject, body = queued.call_args.args
        assert subject == "New Coupon Available!"
        assert "SAVE10" in body

    def test_duplicate_code(self, svc, queued):
        svc.save_coupon("SAVE10", 10)
        with pytest.raises(ConflictError):
            svc.save_coupon("SAVE10", 20)
        assert queued.call_count == 1

    def test_verify(self, svc, queued):
        svc.save_coupon("SAVE10", 10)
        assert svc.verify_coupon("SAVE10") == 10
        with pytest.raises(NotFoundError):
            svc.verify_coupon("NOPE")

    def test_delete_needs_matching_percentage(self, svc, queued):
        svc.save_coupon("SAVE10", 10)

        with pytest.raises(NotFoundError):
            svc.delete_coupon("SAVE10", 20)

        assert svc.delete_coupon("SAVE10", 10) is True
        assert svc.list_coupons() == []
        assert queued.call_args.args[0] == "Coupon Expired"


class TestProductService:
    @pytest.fixture()
    def svc(self, db, generator):
        return ProductService(db, generator=generator)

    @pytest.fixture()
    def products(self, db):
        rows = [
            ProductModel(name="Kettle", price=Decimal("999.00")),
            ProductModel(name="Mug", price=Decimal("199.00")),
            ProductModel(product_id="123456", name="Lamp", price=Decimal("1499.00")),
        ]
        db.add_all(rows)
        db.commit()
        return rows

    def test_assigns_only_missing_ids(self, svc, products):
        assigned = svc.assign_product_ids()

        assert [p["name"] for p in assigned] == ["Kettle", "Mug"]
        ids = [p["product_id"] for p in assigned]
        assert all(re.fullmatch(r"\d{6}", i) for i in ids)
        assert "123456" not in ids
        assert len(set(ids)) == 2

    def test_second_run_is_noop(self, svc, products):
        svc.assign_product_ids()
        assert svc.assign_product_ids() == []

    def test_existing_ids_are_reserved(self, svc, products, generator):
        svc.assign_product_ids()
        assert generator.reserved_count("product") == 3

    def test_update_stock(self, svc, products):
        product = svc.update_stock("123456", 5, 2)
        assert (product["in_stock_value"], product["sold_stock_value"]) == (5, 2)

    def test_update_stock_rejects_negative(self, svc, products):
        with pytest.raises(ValidationError) as exc:
            svc.update_stock("123456", -1, 0)
        assert "inStockValue" in exc.value.details

    def test_update_stock_unknown_product(self, svc, products):
        with pytest.raises(NotFoundError):
            svc.update_stock("999999", 1, 1)
