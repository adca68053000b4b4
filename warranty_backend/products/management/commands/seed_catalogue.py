from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from batches.services.intake import receive_warehouse_batch
from batches.services.pools import BatchPool
from dealers.models import Dealer
from products.models import Product, ProductRecipe, RawMaterial, RecipeItem


class Command(BaseCommand):
    help = "Seed raw materials, products + recipes, a demo dealer and warehouse batches"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding catalogue and warehouse stock..."))

        # -------------------------------
        # RAW MATERIALS
        # -------------------------------
        materials_data = [
            ("FILM-CLR", "Clear protection film", "FILM", "m2"),
            ("FILM-TNT", "Tint film 35%", "FILM", "m2"),
            ("ADH-01", "Mounting adhesive", "ADHESIVE", "l"),
        ]

        materials = {}
        for code, name, material_type, unit in materials_data:
            material, _ = RawMaterial.objects.get_or_create(
                material_code=code,
                defaults={"material_name": name, "material_type": material_type, "unit": unit},
            )
            materials[code] = material

        # -------------------------------
        # PRODUCTS + RECIPES (per m2)
        # -------------------------------
        recipes_data = [
            ("PPF-STD", "Paint protection (standard)", [("FILM-CLR", "1.1000"), ("ADH-01", "0.0500")]),
            ("TINT-35", "Window tint 35%", [("FILM-TNT", "1.0500")]),
        ]

        for product_code, product_name, lines in recipes_data:
            product, _ = Product.objects.get_or_create(
                product_code=product_code,
                defaults={"product_name": product_name},
            )
            recipe, _ = ProductRecipe.objects.get_or_create(
                product=product,
                defaults={
                    "recipe_name": f"{product_name} per m2",
                    "calculation_unit": ProductRecipe.CalculationUnit.PER_SQM,
                },
            )
            for material_code, qty in lines:
                RecipeItem.objects.get_or_create(
                    recipe=recipe,
                    raw_material=materials[material_code],
                    defaults={"quantity_per_unit": Decimal(qty), "unit": materials[material_code].unit},
                )

        # -------------------------------
        # DEALER
        # -------------------------------
        Dealer.objects.get_or_create(
            dealer_code="DLR-001",
            defaults={"dealer_name": "Demo Installer", "region": "Central"},
        )

        # -------------------------------
        # WAREHOUSE BATCHES (FIFO)
        # -------------------------------
        warehouse = BatchPool.warehouse()
        today = timezone.localdate()

        for code, material in materials.items():
            for i in range(2):
                number = f"{code}-B{i + 1}"
                if warehouse.queryset().filter(batch_number=number).exists():
                    continue
                receive_warehouse_batch(
                    raw_material=material,
                    batch_number=number,
                    quantity=Decimal("50") + i * Decimal("25"),
                    expiry_date=today + timedelta(days=180 + i * 60),
                    received_at=timezone.now() - timedelta(days=30 - i * 10),
                    supplier="Seed supplier",
                )

        self.stdout.write(self.style.SUCCESS("Catalogue and warehouse stock seeded."))
