"""Tillman admin.

Balances only change through LedgerService, so ledger rows are read-only
here. Queued outbox entries can be inspected but not edited.
"""

from django.contrib import admin
from django.utils.html import format_html

from tillman.models import LedgerAccount, LedgerEntry, OutboxEntry, OutboxStatus


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ===========================================
# Ledger Admin
# ===========================================


class RecentEntryInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = LedgerEntry
    extra = 0
    fields = ["reference", "entry_type", "delta", "balance_after", "created_at"]
    readonly_fields = fields
    ordering = ["-created_at", "-id"]
    max_num = 20
    verbose_name_plural = "Lançamentos (últimos 20)"


@admin.register(LedgerAccount)
class LedgerAccountAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = [
        "customer_ref",
        "store_ref",
        "balance",
        "lifetime_earned",
        "lifetime_redeemed",
        "updated_at",
    ]
    list_filter = ["store_ref"]
    search_fields = ["customer_ref"]
    readonly_fields = [
        "customer_ref",
        "store_ref",
        "balance",
        "lifetime_earned",
        "lifetime_redeemed",
        "created_at",
        "updated_at",
    ]
    inlines = [RecentEntryInline]


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = [
        "reference",
        "account",
        "entry_type",
        "delta",
        "balance_after",
        "created_by",
        "created_at",
    ]
    list_filter = ["entry_type", "account__store_ref"]
    search_fields = ["reference", "account__customer_ref"]
    date_hierarchy = "created_at"


# ===========================================
# Outbox Admin
# ===========================================


@admin.register(OutboxEntry)
class OutboxEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = [
        "sale_ref",
        "store_ref",
        "customer_ref",
        "status_badge",
        "attempts",
        "enqueued_at",
        "settled_at",
    ]
    list_filter = ["status", "store_ref"]
    search_fields = ["sale_ref", "customer_ref"]
    readonly_fields = [
        "sale_ref",
        "store_ref",
        "customer_ref",
        "payload",
        "status",
        "attempts",
        "last_error",
        "last_attempt_at",
        "enqueued_at",
        "settled_at",
    ]

    def status_badge(self, obj):
        color = "green" if obj.status == OutboxStatus.SETTLED else "orange"
        return format_html(
            '<span style="color: {};">{}</span>',
            color,
            obj.get_status_display(),
        )

    status_badge.short_description = "Status"
