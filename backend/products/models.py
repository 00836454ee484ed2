from django.db import models
from django.core.validators import MinValueValidator
from django.utils.text import slugify
from django.utils.translation import gettext_lazy as _
from core_backend.utils.archiving import SoftDeleteMixin


class Category(models.Model):
    name = models.CharField(
        max_length=100, unique=True, help_text=_("Name of the menu section.")
    )
    slug = models.SlugField(max_length=100, unique=True, blank=True)
    order = models.IntegerField(
        default=0,
        help_text=_("Display order for this category. Lower numbers appear first."),
    )

    class Meta:
        verbose_name_plural = "categories"
        ordering = ["order", "name"]

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class Product(SoftDeleteMixin):
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price_cents = models.PositiveIntegerField(
        validators=[MinValueValidator(0)],
        help_text=_("Unit price in minor units of the display currency."),
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )
    image_url = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["category__order", "name"]
        indexes = [
            models.Index(fields=["is_active", "category"], name="products_pr_is_acti_5d7e21_idx"),
        ]

    def __str__(self):
        return self.name
