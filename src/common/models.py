import typing as t
import uuid

from django.db import models


class TimeStampedModel(models.Model):
    """UUID primary key plus creation and modification timestamps.

    Saving validates the instance first, so constraints declared on the model
    (conditional unique constraints included) fail as ``ValidationError``
    before the row reaches the database.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        abstract = True

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Run full_clean, limited to the updated fields on a partial save."""
        update_fields = kwargs.get("update_fields")
        if update_fields is None:
            self.full_clean()
        else:
            excluded = [f.name for f in self._meta.fields if f.name not in update_fields]
            self.full_clean(exclude=excluded, validate_constraints=False)
        super().save(*args, **kwargs)
