from django.contrib import admin
from .models import CustomerLead


@admin.register(CustomerLead)
class CustomerLeadAdmin(admin.ModelAdmin):
    list_display = ("name", "table_number", "phone", "email", "created_at")
    search_fields = ("name", "phone", "email")
    list_filter = ("table_number",)
    readonly_fields = ("created_at",)
