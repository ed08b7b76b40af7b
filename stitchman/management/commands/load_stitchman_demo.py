"""
Load demo data for Stitchman.

Creates a small wallet workshop:
- Three sewers
- Pending, in-progress and completed orders spread over the last days

Usage:
    python manage.py load_stitchman_demo
    python manage.py load_stitchman_demo --clear
"""

from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

WALLET_TYPES = [
    ("Georgetown", 2),
    ("Minimalist Badge Wallet", 2),
    ("Rio Grande", 5),
    ("Tyler", 3),
]

SEWERS = ["Maria Garcia", "John Smith", "Sarah Johnson"]

# (order_number, wallet type index, orderer, hours since creation)
PENDING = [
    ("#1001", 0, "John Anderson", 48),
    ("#1002", 2, "Emily Chen", 24),
    ("#1003", 3, "Michael Rodriguez", 24),
    ("#1004", 1, "Sarah Thompson", 12),
]

# (order_number, wallet type index, orderer, sewer index, hours since claim)
IN_PROGRESS = [
    ("#1005", 0, "David Wilson", 0, 2),
    ("#1006", 2, "Lisa Martinez", 1, 4),
]

# days ago each completed order finished
COMPLETED_DAYS_AGO = [1, 1, 2, 2, 3, 4]
COMPLETED_ORDERERS = [
    "Robert Taylor",
    "Jennifer Brown",
    "William Davis",
    "Amanda White",
    "Christopher Lee",
    "Michelle Garcia",
]


class Command(BaseCommand):
    help = "Load demo sewers and wallet orders for Stitchman"

    def add_arguments(self, parser):
        parser.add_argument(
            "--clear",
            action="store_true",
            help="Delete existing orders and sewers first",
        )

    def handle(self, *args, **options):
        from stitchman.models import Order, OrderStatus, Sewer

        self.stdout.write("=" * 60)
        self.stdout.write("🧵 Loading Stitchman demo data...")
        self.stdout.write("=" * 60)

        with transaction.atomic():
            if options["clear"]:
                self.stdout.write("\n🗑️  Clearing existing data...")
                Order.objects.all().delete()
                Order.history.all().delete()
                Sewer.objects.all().delete()
                self.stdout.write(self.style.SUCCESS("   ✓ Data cleared"))

            sewers = self._create_sewers(Sewer)
            self._create_orders(Order, OrderStatus, sewers)

        self.stdout.write("\n" + "=" * 60)
        self.stdout.write(self.style.SUCCESS("✅ Demo data loaded"))
        self.stdout.write("=" * 60)
        self._print_summary(Order, OrderStatus, Sewer)

    def _create_sewers(self, Sewer):
        self.stdout.write("\n👤 Creating sewers...")
        sewers = []
        for name in SEWERS:
            sewer, created = Sewer.objects.get_or_create(name=name)
            if not sewer.is_active:
                sewer.activate()
            if created:
                self.stdout.write(f"   ✓ {sewer.name}")
            sewers.append(sewer)
        return sewers

    def _create_orders(self, Order, OrderStatus, sewers):
        self.stdout.write("\n📦 Creating orders...")
        now = timezone.now()
        created = 0

        def make(order_number, type_index, orderer, created_at, **fields):
            nonlocal created
            if Order.objects.filter(order_number=order_number).exists():
                return
            wallet_type, points = WALLET_TYPES[type_index]
            order = Order.objects.create(
                order_number=order_number,
                wallet_type=wallet_type,
                points=points,
                orderer_name=orderer,
                total_wallets=1,
                **fields,
            )
            # auto_now_add ignores a passed value
            Order.objects.filter(pk=order.pk).update(created_at=created_at)
            created += 1

        for order_number, type_index, orderer, hours in PENDING:
            make(
                order_number,
                type_index,
                orderer,
                now - timedelta(hours=hours),
                status=OrderStatus.PENDING,
            )

        for order_number, type_index, orderer, sewer_index, hours in IN_PROGRESS:
            make(
                order_number,
                type_index,
                orderer,
                now - timedelta(days=3),
                status=OrderStatus.IN_PROGRESS,
                claimed_by=sewers[sewer_index],
                claimed_at=now - timedelta(hours=hours),
            )

        for index, days_ago in enumerate(COMPLETED_DAYS_AGO):
            completed_at = now - timedelta(days=days_ago)
            make(
                f"#{2000 + index}",
                index % len(WALLET_TYPES),
                COMPLETED_ORDERERS[index],
                completed_at - timedelta(days=1),
                status=OrderStatus.COMPLETED,
                claimed_by=sewers[index % len(sewers)],
                claimed_at=completed_at - timedelta(hours=2),
                completed_at=completed_at,
            )

        self.stdout.write(f"   ✓ {created} orders created")

    def _print_summary(self, Order, OrderStatus, Sewer):
        self.stdout.write("\n📊 Summary:")
        self.stdout.write(f"   • {Sewer.objects.active().count()} active sewers")
        for status in OrderStatus:
            count = Order.objects.filter(status=status).count()
            self.stdout.write(f"   • {count} {status.label.lower()}")
