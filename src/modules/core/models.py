"""Base abstract models shared by every tenant-scoped module.

Provides:
- ``BaseModel``: UUIDv7 primary key + created_at / updated_at timestamps.
- ``TenantScopedModel``: BaseModel plus the owning tenant (``Company``).

Every read of a tenant-scoped row goes through a repository that filters by
``tenant_id``; a row belonging to another tenant is indistinguishable from a
missing one.
"""

from __future__ import annotations

import uuid6
from django.db import models

# ---------------------------------------------------------------------------
# BaseModel
# ---------------------------------------------------------------------------


class BaseModel(models.Model):
    """Abstract base with UUIDv7 PK and timestamp bookkeeping."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Tenant scoping
# ---------------------------------------------------------------------------


class TenantScopedModel(BaseModel):
    """Abstract base for rows owned by a single tenant (company)."""

    tenant = models.ForeignKey(
        "companies.Company",
        on_delete=models.PROTECT,
        related_name="+",
    )

    class Meta:
        abstract = True
