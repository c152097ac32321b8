import pytest

from storefront.domain.errors import InvalidTransitionError, ValidationError
from storefront.domain.order_status import OrderStatus, ensure_transition, is_terminal


class TestTransitions:
    @pytest.mark.parametrize(
        "current,target",
        [
            ("Pending", "Processing"),
            ("Processing", "Shipped"),
            ("Shipped", "Delivered"),
            ("Pending", "Cancelled"),
            ("Processing", "Cancelled"),
            ("Shipped", "Cancelled"),
        ],
    )
    def test_forward_moves_allowed(self, current, target):
        assert ensure_transition(current, target) == OrderStatus(target)

    @pytest.mark.parametrize(
        "current,target",
        [
            ("Delivered", "Pending"),
            ("Shipped", "Processing"),
            ("Pending", "Shipped"),
            ("Cancelled", "Processing"),
            ("Delivered", "Cancelled"),
            ("Pending", "Pending"),
        ],
    )
    def test_invalid_moves_rejected(self, current, target):
        with pytest.raises(InvalidTransitionError):
            ensure_transition(current, target)

    def test_unknown_status_is_validation_error(self):
        with pytest.raises(ValidationError):
            ensure_transition("Pending", "Lost")

    def test_terminal_states(self):
        assert is_terminal(OrderStatus.DELIVERED)
        assert is_terminal(OrderStatus.CANCELLED)
        assert not is_terminal(OrderStatus.SHIPPED)
