"""Admin classes for events, tickets, invitation codes, form fields and registrations."""

from django.contrib import admin
from unfold.admin import ModelAdmin, TabularInline

from registrations import models


class TicketInline(TabularInline):  # type: ignore[misc]
    model = models.Ticket
    extra = 0
    fields = ["name", "quantity", "sold_count", "sale_start", "sale_end", "require_invite_code", "is_active", "hidden"]
    readonly_fields = ["sold_count"]


class FormFieldInline(TabularInline):  # type: ignore[misc]
    model = models.FormField
    extra = 0
    fields = ["order", "type", "name", "description", "required", "ticket", "validater", "enable_other"]


@admin.register(models.Event)
class EventAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["name", "slug", "start", "end", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["name", "slug"]
    prepopulated_fields = {"slug": ["name"]}
    date_hierarchy = "start"
    inlines = [TicketInline, FormFieldInline]


@admin.register(models.Ticket)
class TicketAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["name", "event", "quantity", "sold_count", "remaining", "require_invite_code", "is_active", "hidden"]
    list_filter = ["event", "is_active", "hidden", "require_invite_code"]
    search_fields = ["name", "event__name"]
    readonly_fields = ["sold_count"]

    @admin.display(description="Remaining")
    def remaining(self, obj: models.Ticket) -> int:
        return obj.remaining


@admin.register(models.InvitationCode)
class InvitationCodeAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["code", "name", "ticket", "used_count", "usage_limit", "valid_from", "valid_until", "is_active"]
    list_filter = ["is_active", "ticket__event"]
    search_fields = ["code", "name"]
    readonly_fields = ["used_count"]


@admin.register(models.FormField)
class FormFieldAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["__str__", "event", "ticket", "type", "required", "order"]
    list_filter = ["event", "type", "required"]
    ordering = ["event", "order"]


class RegistrationDataInline(TabularInline):  # type: ignore[misc]
    model = models.RegistrationData
    extra = 0
    fields = ["field", "value", "updated_at"]
    readonly_fields = ["field", "value", "updated_at"]
    can_delete = False


@admin.register(models.Registration)
class RegistrationAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["email", "event", "ticket", "status", "check_in_code", "created_at"]
    list_filter = ["status", "event"]
    search_fields = ["email", "check_in_code"]
    readonly_fields = [
        "id",
        "check_in_code",
        "referred_by",
        "invitation_code",
        "cancelled_at",
        "created_at",
        "updated_at",
    ]
    exclude = ["edit_token_hash", "edit_token_expiry"]
    date_hierarchy = "created_at"
    inlines = [RegistrationDataInline]

    def has_delete_permission(self, request: object, obj: object = None) -> bool:
        return False
