from django.contrib import admin

from orders.models import Order, OrderLine


class OrderLineInline(admin.TabularInline):
    model = OrderLine
    extra = 0
    raw_id_fields = ("product",)
    ordering = ("position",)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "is_paid", "created_at")
    list_filter = ("is_paid", "created_at")
    search_fields = ("id", "user__email")
    ordering = ("-created_at",)
    raw_id_fields = ("user",)
    readonly_fields = ("id", "is_paid", "created_at", "updated_at")
    inlines = [OrderLineInline]
