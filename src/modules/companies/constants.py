"""Company (tenant) constants."""

from django.db import models


class FeeType(models.TextChoices):
    PERCENTAGE = "PERCENTAGE", "Percentage"
    FIXED = "FIXED", "Fixed"
