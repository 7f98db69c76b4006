from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.companies.constants import FeeType
from modules.companies.models import Company
from modules.discounts.constants import DiscountType
from modules.discounts.models import Coupon, Promotion
from modules.menu.models import MenuItem
from modules.orders.dtos import CreateOrderDTO, OrderLineDTO
from modules.orders.services import build_order_service
from shared.domain.errors import DomainError


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=20)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        companies = self._seed_companies()
        menu = {company.id: self._seed_menu(company) for company in companies}
        discounts = {company.id: self._seed_discounts(company) for company in companies}
        orders_created = self._seed_orders(companies, menu, discounts, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"companies={len(companies)}, "
                f"menu_items={sum(len(items) for items in menu.values())}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="staff").exists():
            User.objects.create_user("staff", password="staff123", is_staff=True)
            created += 1
        return created

    def _seed_companies(self) -> list[Company]:
        self.stdout.write("Creating companies...")
        seed = [
            ("Cantina da Praça", "cantina@example.com", FeeType.PERCENTAGE, "5.00"),
            ("Burger Norte", "burger@example.com", FeeType.FIXED, "2.50"),
        ]
        companies = []
        for name, email, fee_type, fee_value in seed:
            company, _ = Company.objects.get_or_create(
                email=email,
                defaults={
                    "name": name,
                    "fee_type": fee_type,
                    "fee_value": Decimal(fee_value),
                },
            )
            companies.append(company)
        return companies

    def _seed_menu(self, company: Company) -> list[MenuItem]:
        seed = [
            ("Pizza Margherita", "42.90"),
            ("Lasagna", "38.50"),
            ("Cheeseburger", "27.00"),
            ("Caesar Salad", "24.90"),
            ("Lemonade", "8.00"),
            ("Tiramisu", "16.50"),
        ]
        items = []
        for name, price in seed:
            item, _ = MenuItem.objects.get_or_create(
                tenant=company, name=name, defaults={"price": Decimal(price)}
            )
            items.append(item)
        return items

    def _seed_discounts(self, company: Company) -> dict:
        now = timezone.now()
        coupon, _ = Coupon.objects.get_or_create(
            tenant=company,
            code="WELCOME10",
            defaults={
                "discount_type": DiscountType.PERCENTAGE,
                "discount_value": Decimal("10"),
                "max_total_uses": 100,
                "max_uses_per_customer": 1,
                "start_date": now - timedelta(days=1),
                "end_date": now + timedelta(days=30),
            },
        )
        promotion, _ = Promotion.objects.get_or_create(
            tenant=company,
            name="Lunch Deal",
            defaults={
                "description": "Five off any lunch order.",
                "discount_type": DiscountType.FIXED,
                "discount_value": Decimal("5.00"),
                "days_of_week": [0, 1, 2, 3, 4],
                "hours": "11:00-15:00",
                "start_date": now - timedelta(days=1),
                "end_date": now + timedelta(days=90),
            },
        )
        return {"coupon": coupon, "promotion": promotion}

    def _seed_orders(self, companies, menu, discounts, count: int) -> int:
        self.stdout.write("Creating orders...")
        service = build_order_service()
        phones = [f"+55119{n:08d}" for n in range(1, 11)]
        created = 0
        for _ in range(count):
            company = random.choice(companies)
            items = random.sample(menu[company.id], k=random.randint(1, 3))
            choice = random.random()
            dto = CreateOrderDTO(
                tenant_id=company.id,
                customer_phone_number=random.choice(phones),
                items=[
                    OrderLineDTO(menu_item_id=item.id, quantity=random.randint(1, 3))
                    for item in items
                ],
                coupon_id=discounts[company.id]["coupon"].id if choice < 0.2 else None,
                promotion_id=(
                    discounts[company.id]["promotion"].id if 0.2 <= choice < 0.4 else None
                ),
            )
            try:
                service.create_order(dto)
            except DomainError as exc:
                self.stdout.write(self.style.WARNING(f"Skipped order: {exc.code}"))
                continue
            created += 1
        return created
