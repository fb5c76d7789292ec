import uuid

from django.db import models
from django.db.models import Q

from .domain import PRICE_DECIMAL_PLACES, PRICE_MAX_DIGITS


def _new_id() -> str:
    return str(uuid.uuid4())


class ItemRecord(models.Model):
    """
    Catalog item row backing `OrmItemStore`.

    ``quantity`` is written only through the stock ledger. The check
    constraints repeat the invariants so the database rejects a violation even
    from code that bypasses the ledger.
    """

    id = models.CharField(max_length=36, primary_key=True, default=_new_id, editable=False)
    name = models.CharField(max_length=200)
    category = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=PRICE_MAX_DIGITS, decimal_places=PRICE_DECIMAL_PLACES)
    quantity = models.BigIntegerField(default=0)
    created_at = models.DateTimeField()

    class Meta:
        db_table = "sweet_ledger_item"
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gte=0), name="sweet_ledger_item_quantity_gte_0"),
            models.CheckConstraint(condition=Q(price__gt=0), name="sweet_ledger_item_price_gt_0"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.quantity})"
