"""Order Pricing Engine.

Pricing steps, in order (the first failure aborts):

1. Snapshot the menu price of every requested line and accumulate the
   subtotal.
2. Resolve the discount (coupon or promotion) against that subtotal.
3. Compute the platform fee from the **pre-discount** subtotal.
4. ``final_total = max(0, subtotal - discount)``.

The engine only computes; ``OrderService`` persists the result.  Patches
use ``plan_line_changes`` to turn a replacement item list into an explicit
line-level delta instead of rebuilding the collection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple, Union
from uuid import UUID

import structlog

from modules.companies.constants import FeeType
from modules.companies.exceptions import CompanyNotFound
from modules.core.money import ZERO, percentage_of, quantize_money
from modules.discounts.dtos import DiscountResolution
from shared.domain.errors import Rejection
from shared.domain.results import Result

if TYPE_CHECKING:
    from modules.companies.dtos import FeeConfig
    from modules.companies.repositories.interfaces import ICompanyRepository
    from modules.discounts.resolver import DiscountResolver
    from modules.menu.services import MenuSnapshotResolver
    from modules.orders.dtos import OrderLineDTO, PatchOrderLineDTO
    from modules.orders.models import OrderItem

logger = structlog.get_logger(__name__)

Identifier = Union[str, UUID]


# ---------------------------------------------------------------------------
# Fee calculator and totals
# ---------------------------------------------------------------------------


def compute_platform_fee(fee_config: FeeConfig, subtotal: Decimal) -> Decimal:
    """Platform fee for an order.

    Percentage fees scale with the subtotal; fixed fees are charged as is,
    regardless of order size.
    """
    if fee_config.fee_type == FeeType.PERCENTAGE:
        return percentage_of(subtotal, fee_config.fee_value)
    return quantize_money(fee_config.fee_value)


def compute_final_total(subtotal: Decimal, discount: Decimal) -> Decimal:
    """``max(0, subtotal - discount)``."""
    return max(ZERO, quantize_money(subtotal - discount))


# ---------------------------------------------------------------------------
# Priced order
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PricedLine:
    line: OrderLineDTO
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.line.quantity * self.unit_price


@dataclass(frozen=True)
class PricedOrder:
    """Immutable result of pricing a creation request."""

    lines: Tuple[PricedLine, ...]
    subtotal: Decimal
    discount: DiscountResolution
    platform_fee: Decimal
    final_total: Decimal

    @property
    def discount_amount(self) -> Decimal:
        return self.discount.amount


class OrderPricingEngine:
    """Price an order from its requested lines and discount reference."""

    def __init__(
        self,
        menu_resolver: MenuSnapshotResolver,
        discount_resolver: DiscountResolver,
        company_repository: ICompanyRepository,
    ) -> None:
        self._menu = menu_resolver
        self._discounts = discount_resolver
        self._companies = company_repository

    def price_lines(
        self, tenant_id: Identifier, lines: Iterable[OrderLineDTO]
    ) -> Result[List[PricedLine]]:
        """Snapshot the current menu price of each line."""
        priced: List[PricedLine] = []
        for line in lines:
            snapshot = self._menu.resolve(str(tenant_id), str(line.menu_item_id))
            if not snapshot.is_ok:
                return Result.fail(snapshot.rejection)
            priced.append(PricedLine(line=line, unit_price=snapshot.value.price))
        return Result.ok(priced)

    def fee_for(self, tenant_id: Identifier, subtotal: Decimal) -> Result[Decimal]:
        fee_config = self._companies.get_fee_config(str(tenant_id))
        if fee_config is None:
            return Result.fail(
                Rejection.not_found(
                    CompanyNotFound.default_code,
                    f"Company {tenant_id} not found.",
                    tenant_id=tenant_id,
                )
            )
        return Result.ok(compute_platform_fee(fee_config, subtotal))

    def price(
        self,
        tenant_id: Identifier,
        customer_phone_number: str,
        lines: Sequence[OrderLineDTO],
        coupon_id: Optional[Identifier] = None,
        promotion_id: Optional[Identifier] = None,
    ) -> Result[PricedOrder]:
        log = logger.bind(tenant_id=str(tenant_id), line_count=len(lines))

        priced_lines = self.price_lines(tenant_id, lines)
        if not priced_lines.is_ok:
            return Result.fail(priced_lines.rejection)
        subtotal = sum((pl.subtotal for pl in priced_lines.value), ZERO)

        discount = self._discounts.resolve(
            tenant_id,
            customer_phone_number,
            subtotal,
            coupon_id=coupon_id,
            promotion_id=promotion_id,
        )
        if not discount.is_ok:
            return Result.fail(discount.rejection)

        fee = self.fee_for(tenant_id, subtotal)
        if not fee.is_ok:
            return Result.fail(fee.rejection)

        final_total = compute_final_total(subtotal, discount.value.amount)
        log.info(
            "order.priced",
            subtotal=str(subtotal),
            discount=str(discount.value.amount),
            platform_fee=str(fee.value),
            final_total=str(final_total),
        )
        return Result.ok(
            PricedOrder(
                lines=tuple(priced_lines.value),
                subtotal=subtotal,
                discount=discount.value,
                platform_fee=fee.value,
                final_total=final_total,
            )
        )


# ---------------------------------------------------------------------------
# Line diff for patches
# ---------------------------------------------------------------------------


@dataclass
class LineDelta:
    """Changes turning the current lines into the requested ones.

    ``updated`` pairs an existing item with the line that replaces its
    details; the item keeps its id and its ``unit_price`` snapshot.
    """

    added: List[PatchOrderLineDTO] = field(default_factory=list)
    updated: List[Tuple[OrderItem, PatchOrderLineDTO]] = field(default_factory=list)
    removed: List[OrderItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.updated or self.removed)


def plan_line_changes(
    existing: Sequence[OrderItem], requested: Sequence[PatchOrderLineDTO]
) -> LineDelta:
    """Diff the requested item list against the current one.

    - A requested line whose ``id`` names an existing item for the same menu
      item updates that item.
    - A requested line naming an existing item but a different menu item
      replaces it: the old item is removed and a new one is added.
    - A requested line without ``id``, or with an unknown one, is added.
    - Existing items not named by any requested line are removed.
    """
    by_id = {str(item.id): item for item in existing}
    delta = LineDelta()
    kept: set[str] = set()

    for line in requested:
        item = by_id.get(str(line.id)) if line.id is not None else None
        if item is not None and str(item.menu_item_id) == str(line.menu_item_id):
            kept.add(str(item.id))
            if _line_differs(item, line):
                delta.updated.append((item, line))
        else:
            delta.added.append(line)

    delta.removed = [item for key, item in by_id.items() if key not in kept]
    return delta


def _line_differs(item: OrderItem, line: PatchOrderLineDTO) -> bool:
    details = line.detail_fields()
    return item.quantity != line.quantity or any(
        getattr(item, name) != value for name, value in details.items()
    )
