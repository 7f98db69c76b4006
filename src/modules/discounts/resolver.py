"""Discount Resolver.

Chooses at most one discount mechanism for an order and prices it:

1. A coupon id wins; a promotion id sent alongside it is ignored.
2. The mechanism row is loaded with ``SELECT ... FOR UPDATE`` and stays
   locked until the caller's transaction ends, so eligibility check and
   usage recording form one critical section per mechanism.
3. Checks run in a fixed order and stop at the first failure:
   existence, active flag and validity window, total-use limit,
   per-customer limit.
4. ``record`` appends the usage record and recounts.  A count above a
   limit means a concurrent request slipped past the check; the result is a
   ``CONFLICT`` rejection and the caller rolls back.

Must be called inside ``transaction.atomic``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Optional, Union
from uuid import UUID

import structlog
from django.utils import timezone

from modules.core.money import percentage_of, quantize_money
from modules.discounts import constants as codes
from modules.discounts.constants import DiscountType, MechanismKind
from modules.discounts.dtos import NO_DISCOUNT, AppliedDiscount, DiscountResolution
from shared.domain.errors import Rejection
from shared.domain.results import Result

if TYPE_CHECKING:
    from modules.discounts.models import DiscountMechanism
    from modules.discounts.repositories.interfaces import (
        ICouponRepository,
        IDiscountMechanismRepository,
        IPromotionRepository,
    )

logger = structlog.get_logger(__name__)

Identifier = Union[str, UUID]


@dataclass(frozen=True)
class _RuleCodes:
    not_found: str
    invalid: str
    max_total_uses: str
    max_uses_per_customer: str
    usage_limit_race: str


_CODES: Dict[MechanismKind, _RuleCodes] = {
    MechanismKind.COUPON: _RuleCodes(
        not_found=codes.COUPON_NOT_FOUND,
        invalid=codes.COUPON_INVALID,
        max_total_uses=codes.COUPON_MAX_TOTAL_USES,
        max_uses_per_customer=codes.COUPON_MAX_USES_PER_CUSTOMER,
        usage_limit_race=codes.COUPON_USAGE_LIMIT_RACE,
    ),
    MechanismKind.PROMOTION: _RuleCodes(
        not_found=codes.PROMOTION_NOT_FOUND,
        invalid=codes.PROMOTION_INVALID,
        max_total_uses=codes.PROMOTION_MAX_TOTAL_USES,
        max_uses_per_customer=codes.PROMOTION_MAX_USES_PER_CUSTOMER,
        usage_limit_race=codes.PROMOTION_USAGE_LIMIT_RACE,
    ),
}


def discount_amount(
    discount_type: str, discount_value: Decimal, subtotal: Decimal
) -> Decimal:
    """Percentage discounts scale with the subtotal; other types pass the value through."""
    if discount_type == DiscountType.PERCENTAGE:
        return percentage_of(subtotal, discount_value)
    return quantize_money(discount_value)


class DiscountResolver:
    """Resolve and record the single discount mechanism of an order."""

    def __init__(
        self,
        coupon_repository: ICouponRepository,
        promotion_repository: IPromotionRepository,
    ) -> None:
        self._repos: Dict[MechanismKind, IDiscountMechanismRepository] = {
            MechanismKind.COUPON: coupon_repository,
            MechanismKind.PROMOTION: promotion_repository,
        }

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(
        self,
        tenant_id: Identifier,
        customer_phone_number: str,
        subtotal: Decimal,
        coupon_id: Optional[Identifier] = None,
        promotion_id: Optional[Identifier] = None,
        now: Optional[datetime] = None,
    ) -> Result[DiscountResolution]:
        if coupon_id is not None:
            if promotion_id is not None:
                logger.info(
                    "discount.promotion_ignored",
                    coupon_id=str(coupon_id),
                    promotion_id=str(promotion_id),
                )
            kind, mechanism_id = MechanismKind.COUPON, coupon_id
        elif promotion_id is not None:
            kind, mechanism_id = MechanismKind.PROMOTION, promotion_id
        else:
            return Result.ok(NO_DISCOUNT)

        return self._resolve_mechanism(
            kind,
            str(mechanism_id),
            str(tenant_id),
            customer_phone_number,
            subtotal,
            now or timezone.now(),
        )

    def _resolve_mechanism(
        self,
        kind: MechanismKind,
        mechanism_id: str,
        tenant_id: str,
        customer_phone_number: str,
        subtotal: Decimal,
        now: datetime,
    ) -> Result[DiscountResolution]:
        rule_codes = _CODES[kind]
        repo = self._repos[kind]
        label = kind.label.lower()
        log = logger.bind(mechanism=kind.value, mechanism_id=mechanism_id)

        mechanism: Optional[DiscountMechanism] = repo.get_for_update(
            mechanism_id, tenant_id
        )
        if mechanism is None:
            log.warning("discount.rejected", code=rule_codes.not_found)
            return Result.fail(
                Rejection.not_found(
                    rule_codes.not_found,
                    f"{kind.label} {mechanism_id} not found.",
                    mechanism_id=mechanism_id,
                    tenant_id=tenant_id,
                )
            )

        if not mechanism.is_valid_at(now):
            return self._reject(
                log,
                rule_codes.invalid,
                f"The {label} is inactive or outside its validity period.",
                mechanism_id=mechanism_id,
            )

        counts = repo.get_usage_counts(mechanism_id, tenant_id, customer_phone_number)
        if (
            mechanism.max_total_uses is not None
            and counts.total >= mechanism.max_total_uses
        ):
            return self._reject(
                log,
                rule_codes.max_total_uses,
                f"The {label} has reached its maximum number of uses.",
                mechanism_id=mechanism_id,
                max_total_uses=mechanism.max_total_uses,
            )
        if (
            mechanism.max_uses_per_customer is not None
            and counts.by_customer >= mechanism.max_uses_per_customer
        ):
            return self._reject(
                log,
                rule_codes.max_uses_per_customer,
                f"The customer has reached the maximum uses of this {label}.",
                mechanism_id=mechanism_id,
                customer_phone_number=customer_phone_number,
                max_uses_per_customer=mechanism.max_uses_per_customer,
            )

        amount = discount_amount(
            mechanism.discount_type, mechanism.discount_value, subtotal
        )
        log.info("discount.resolved", amount=str(amount))
        return Result.ok(
            DiscountResolution(
                amount=amount,
                applied=AppliedDiscount(
                    kind=kind,
                    mechanism_id=mechanism.id,
                    tenant_id=mechanism.tenant_id,
                    customer_phone_number=customer_phone_number,
                    max_total_uses=mechanism.max_total_uses,
                    max_uses_per_customer=mechanism.max_uses_per_customer,
                ),
            )
        )

    @staticmethod
    def _reject(log, code: str, message: str, **context) -> Result[DiscountResolution]:
        log.warning("discount.rejected", code=code)
        return Result.fail(Rejection.business_rule(code, message, **context))

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record(
        self, resolution: DiscountResolution, order_id: Identifier
    ) -> Result[None]:
        """Append the usage record of ``resolution`` and verify the limits still hold."""
        applied = resolution.applied
        if applied is None:
            return Result.ok(None)

        repo = self._repos[applied.kind]
        mechanism_id = str(applied.mechanism_id)
        tenant_id = str(applied.tenant_id)
        repo.record_usage(
            mechanism_id, tenant_id, applied.customer_phone_number, str(order_id)
        )

        counts = repo.get_usage_counts(
            mechanism_id, tenant_id, applied.customer_phone_number
        )
        over_total = (
            applied.max_total_uses is not None
            and counts.total > applied.max_total_uses
        )
        over_customer = (
            applied.max_uses_per_customer is not None
            and counts.by_customer > applied.max_uses_per_customer
        )
        if over_total or over_customer:
            code = _CODES[applied.kind].usage_limit_race
            logger.warning(
                "discount.usage_limit_race",
                code=code,
                mechanism_id=mechanism_id,
                order_id=str(order_id),
                total=counts.total,
                by_customer=counts.by_customer,
            )
            return Result.fail(
                Rejection.conflict(
                    code,
                    "A concurrent order used up this discount; retry the order.",
                    mechanism_id=mechanism_id,
                    order_id=order_id,
                )
            )
        return Result.ok(None)
