from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field

CENT = Decimal("0.01")


def to_money(value: float | Decimal) -> Decimal:
    """Exact two-place amount for a price; floats go through their shortest repr."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_prices(prices: Iterable[float | Decimal]) -> Decimal:
    return sum((to_money(price) for price in prices), Decimal("0.00"))


class ProductSnapshot(BaseModel):
    """Menu product as it looked when the customer picked it."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    price: float = Field(ge=0)
    category: str | None = None
    image: str | None = None


class CartItem(BaseModel):
    """One unit of a product in the cart; two bowls are two items."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    product: ProductSnapshot
    note: str = ""
    selected_options: dict[str, str] = Field(default_factory=dict, alias="selectedOptions")


class CartGroup(BaseModel):
    product: ProductSnapshot
    selected_options: dict[str, str] = Field(default_factory=dict)
    items: list[CartItem]

    @property
    def quantity(self) -> int:
        return len(self.items)

    @property
    def subtotal(self) -> float:
        return float(sum_prices(item.product.price for item in self.items))


class CustomerInfo(BaseModel):
    name: str = ""
    phone: str = ""
    address: str = ""
    landmark: str = ""
