from tortoise import fields, models
import uuid

# Largest value the 32-bit quantity column holds
MAX_QUANTITY = 2**31 - 1


class Sweet(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    name = fields.CharField(max_length=255)
    description = fields.TextField()
    category = fields.CharField(max_length=128)
    image_url = fields.CharField(max_length=1024)
    price = fields.FloatField()
    # The only stock field. Mutated through conditional queryset updates, never read-then-write.
    quantity = fields.IntField(default=0)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "sweets"
        ordering = ["-created_at"]
        indexes = [
            ("category",),     # Category search
            ("created_at",),   # Newest-first listing
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.quantity})"
