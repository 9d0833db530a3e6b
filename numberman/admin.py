"""Numberman admin.

Mutations that must keep status, client and history in step (assign,
deassign, generation) go through the services, so phone status and client are
read-only here. Admin actions call the same services the API uses.
"""

from django.contrib import admin, messages
from django.utils.html import format_html

from numberman.exceptions import NumbermanError
from numberman.models import Account, AccountStatus, PhoneNumber, PhoneStatus, UsageEvent
from numberman.services import accounts, transitions

STATUS_COLORS = {
    PhoneStatus.FREE: "green",
    PhoneStatus.IN_USE: "orange",
    AccountStatus.PENDING: "gray",
    AccountStatus.APPROVED: "green",
    AccountStatus.REJECTED: "red",
}


def _badge(value, label):
    return format_html(
        '<span style="color: {}; font-weight: bold;">{}</span>',
        STATUS_COLORS.get(value, "black"),
        label,
    )


# ===========================================
# Inline Classes (must be defined before PhoneNumberAdmin)
# ===========================================


class UsageEventInline(admin.TabularInline):
    model = UsageEvent
    extra = 0
    fields = ["event_type", "client_name", "event_date", "notes"]
    readonly_fields = ["event_type", "client_name"]
    ordering = ["event_date"]

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ===========================================
# PhoneNumber Admin
# ===========================================


@admin.register(PhoneNumber)
class PhoneNumberAdmin(admin.ModelAdmin):
    list_display = [
        "number",
        "status_badge",
        "client",
        "block_prefix",
        "updated_at",
    ]
    list_filter = ["status"]
    search_fields = ["number", "client"]
    readonly_fields = ["id", "status", "client", "created_at", "updated_at"]
    inlines = [UsageEventInline]
    actions = ["deassign_selected"]

    fieldsets = [
        (None, {"fields": ["id", "number"]}),
        ("Assignment", {"fields": ["status", "client"]}),
        ("Timestamps", {"fields": ["created_at", "updated_at"], "classes": ["collapse"]}),
    ]

    def status_badge(self, obj):
        return _badge(obj.status, obj.get_status_display())

    status_badge.short_description = "Status"

    def block_prefix(self, obj):
        return obj.block_prefix

    block_prefix.short_description = "Block"

    @admin.action(description="Deassign selected numbers")
    def deassign_selected(self, request, queryset):
        ids = list(queryset.values_list("pk", flat=True))
        try:
            result = transitions.deassign(ids, notes="Deassigned via admin")
        except NumbermanError as exc:
            self.message_user(request, exc.message, level=messages.ERROR)
            return
        self.message_user(request, f"{result.updated_count} numbers deassigned.")


# ===========================================
# UsageEvent Admin
# ===========================================


@admin.register(UsageEvent)
class UsageEventAdmin(admin.ModelAdmin):
    list_display = ["phone", "event_type", "client_name", "event_date", "notes"]
    list_filter = ["event_type"]
    search_fields = ["phone__number", "client_name", "notes"]
    readonly_fields = ["id", "phone", "event_type", "client_name"]
    date_hierarchy = "event_date"

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ===========================================
# Account Admin
# ===========================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ["email", "name", "role", "status_badge", "is_bootstrap", "created_at"]
    list_filter = ["role", "status"]
    search_fields = ["email", "name"]
    readonly_fields = ["id", "is_bootstrap", "created_at", "updated_at"]
    actions = ["approve_selected", "reject_selected"]

    fieldsets = [
        (None, {"fields": ["id", "email", "name", "image"]}),
        ("Access", {"fields": ["role", "status", "is_bootstrap"]}),
        ("Timestamps", {"fields": ["created_at", "updated_at"], "classes": ["collapse"]}),
    ]

    def status_badge(self, obj):
        return _badge(obj.status, obj.get_status_display())

    status_badge.short_description = "Status"

    def _set_status(self, request, queryset, status):
        # Bootstrap admin keeps its status whatever the selection
        changed = accounts.moderate(queryset, status, by=request.user.get_username())
        self.message_user(request, f"{len(changed)} accounts marked {status}.")

    @admin.action(description="Approve selected accounts")
    def approve_selected(self, request, queryset):
        self._set_status(request, queryset, AccountStatus.APPROVED)

    @admin.action(description="Reject selected accounts")
    def reject_selected(self, request, queryset):
        self._set_status(request, queryset, AccountStatus.REJECTED)
