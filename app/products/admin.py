from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "price", "stripe_price_id", "created_at")
    search_fields = ("name", "stripe_price_id")
    ordering = ("-created_at",)
    readonly_fields = ("id", "created_at", "updated_at")
