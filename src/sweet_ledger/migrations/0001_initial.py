from django.db import migrations, models

import sweet_ledger.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ItemRecord",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=sweet_ledger.models._new_id,
                        editable=False,
                        max_length=36,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=200)),
                ("category", models.CharField(max_length=100)),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("quantity", models.BigIntegerField(default=0)),
                ("created_at", models.DateTimeField()),
            ],
            options={
                "db_table": "sweet_ledger_item",
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="itemrecord",
            constraint=models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="sweet_ledger_item_quantity_gte_0",
            ),
        ),
        migrations.AddConstraint(
            model_name="itemrecord",
            constraint=models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="sweet_ledger_item_price_gt_0",
            ),
        ),
    ]
