# storefront/domain/code_spaces.py
import random
import string
from dataclasses import dataclass


@dataclass(frozen=True)
class NumericCodeSpace:
    """Fixed-width decimal codes without a leading zero, optionally prefixed."""

    kind: str
    digits: int
    prefix: str = ""

    @property
    def capacity(self) -> int:
        return 9 * 10 ** (self.digits - 1)

    def draw(self, rng: random.Random) -> str:
        low = 10 ** (self.digits - 1)
        return f"{self.prefix}{rng.randint(low, 10 ** self.digits - 1)}"

    def contains(self, code: str) -> bool:
        if not code.startswith(self.prefix):
            return False
        body = code[len(self.prefix):]
        return len(body) == self.digits and body.isascii() and body.isdigit() and body[0] != "0"


@dataclass(frozen=True)
class AlphanumericCodeSpace:
    kind: str
    length: int
    alphabet: str = string.ascii_uppercase + string.digits

    @property
    def capacity(self) -> int:
        return len(self.alphabet) ** self.length

    def draw(self, rng: random.Random) -> str:
        return "".join(rng.choice(self.alphabet) for _ in range(self.length))

    def contains(self, code: str) -> bool:
        return len(code) == self.length and all(c in self.alphabet for c in code)


ORDER_ID = NumericCodeSpace(kind="order", digits=6)
PRODUCT_ID = NumericCodeSpace(kind="product", digits=6)
SELLER_ID = NumericCodeSpace(kind="seller", digits=5, prefix="MBSLR")
TRACKING_ID = AlphanumericCodeSpace(kind="tracking", length=12)
