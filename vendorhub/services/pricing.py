"""
Checkout pricing for vendor-scoped carts.

Rules per line (quantity ``q``):
    subtotal    += main_price * q
    discount    += (main_price - special_price) * q    when a lower special price applies
    packaging   += product packaging_charge * q
    item_total   = effective price * q                  (special price when set, else main)

Per cart the vendor's packaging charge is added once, delivery and convenience
charges come from the vendor, and

    total_payable = subtotal - discount + packaging + delivery + convenience
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


def _money(value: float) -> float:
    return round(float(value), 2)


def _amount(doc: Dict[str, Any], key: str) -> float:
    return float(doc.get(key) or 0)


def special_price_of(product: Dict[str, Any]) -> Optional[float]:
    """A special price counts only when it is set and positive."""
    special = product.get("special_price")
    if special is None or float(special) <= 0:
        return None
    return float(special)


@dataclass
class CartPricing:
    items: List[Dict[str, Any]] = field(default_factory=list)
    subtotal: float = 0.0
    discount: float = 0.0
    packaging_charge: float = 0.0
    delivery_charge: float = 0.0
    convenience_charge: float = 0.0
    total_quantity: int = 0
    total_payable_amount: float = 0.0

    def as_document(self) -> Dict[str, Any]:
        return {
            "items": self.items,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "packaging_charge": self.packaging_charge,
            "delivery_charge": self.delivery_charge,
            "convenience_charge": self.convenience_charge,
            "total_quantity": self.total_quantity,
            "total_payable_amount": self.total_payable_amount,
        }


def price_line(product: Dict[str, Any], quantity: int) -> Dict[str, Any]:
    """Snapshot of one cart line."""
    main_price = _amount(product, "main_price")
    special = special_price_of(product)
    effective = special if special is not None else main_price
    return {
        "product": product["_id"],
        "name": product.get("name"),
        "quantity": quantity,
        "main_price": main_price,
        "special_price": special,
        "item_total": _money(effective * quantity),
    }


def price_cart(vendor: Dict[str, Any], lines: List[Tuple[Dict[str, Any], int]]) -> CartPricing:
    """
    Price one vendor's cart.

    Args:
        vendor: Vendor document (supplies the cart-level charges)
        lines: ``(product document, quantity)`` pairs; quantities must be positive

    Returns:
        CartPricing with rounded monetary values
    """
    subtotal = 0.0
    discount = 0.0
    product_packaging = 0.0
    total_quantity = 0
    items = []

    for product, quantity in lines:
        if quantity <= 0:
            raise ValueError("Quantity must be positive")

        main_price = _amount(product, "main_price")
        special = special_price_of(product)

        subtotal += main_price * quantity
        if special is not None and special < main_price:
            discount += (main_price - special) * quantity
        product_packaging += _amount(product, "packaging_charge") * quantity
        total_quantity += quantity

        items.append(price_line(product, quantity))

    packaging_charge = product_packaging + _amount(vendor, "packaging_charge")
    delivery_charge = _amount(vendor, "delivery_charge")
    convenience_charge = _amount(vendor, "convenience_charge")
    total = subtotal - discount + packaging_charge + delivery_charge + convenience_charge

    return CartPricing(
        items=items,
        subtotal=_money(subtotal),
        discount=_money(discount),
        packaging_charge=_money(packaging_charge),
        delivery_charge=_money(delivery_charge),
        convenience_charge=_money(convenience_charge),
        total_quantity=total_quantity,
        total_payable_amount=_money(total),
    )
