from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("batches", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="stockbatch",
            name="received_quantity",
            field=models.DecimalField(decimal_places=3, default=Decimal("0"), help_text="Total quantity taken in by intake / receipts (service-managed only)", max_digits=14),
        ),
    ]
