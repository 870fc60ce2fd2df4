import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("name", models.CharField(max_length=255)),
                ("slug", models.SlugField(max_length=255, unique=True)),
                ("start", models.DateTimeField(db_index=True)),
                ("end", models.DateTimeField()),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                (
                    "edit_deadline",
                    models.DateTimeField(
                        blank=True,
                        help_text="Registrations cannot be edited after this moment. Falls back to the ticket sale end.",
                        null=True,
                    ),
                ),
            ],
            options={
                "ordering": ["start"],
            },
        ),
        migrations.CreateModel(
            name="Ticket",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("quantity", models.PositiveIntegerField(help_text="Total number of admissions available.")),
                ("sold_count", models.PositiveIntegerField(default=0, editable=False)),
                ("sale_start", models.DateTimeField(blank=True, null=True)),
                ("sale_end", models.DateTimeField(blank=True, null=True)),
                ("require_invite_code", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("hidden", models.BooleanField(default=False)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tickets",
                        to="registrations.event",
                    ),
                ),
            ],
            options={
                "ordering": ["event", "name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("sold_count__lte", models.F("quantity"))),
                        name="ticket_sold_count_within_quantity",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="InvitationCode",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("code", models.CharField(db_index=True, max_length=64)),
                ("name", models.CharField(blank=True, default="", max_length=255)),
                (
                    "usage_limit",
                    models.PositiveIntegerField(blank=True, help_text="Leave empty for unlimited use.", null=True),
                ),
                ("used_count", models.PositiveIntegerField(default=0, editable=False)),
                ("valid_from", models.DateTimeField(blank=True, null=True)),
                ("valid_until", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "ticket",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="invitation_codes",
                        to="registrations.ticket",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("ticket", "code"), name="unique_invitation_code_per_ticket"),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("usage_limit__isnull", True),
                            ("used_count__lte", models.F("usage_limit")),
                            _connector="OR",
                        ),
                        name="invitation_used_count_within_limit",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="FormField",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("text", "Text"),
                            ("textarea", "Textarea"),
                            ("select", "Select"),
                            ("radio", "Radio"),
                            ("checkbox", "Checkbox"),
                        ],
                        max_length=16,
                    ),
                ),
                (
                    "name",
                    models.JSONField(blank=True, default=dict, help_text='Localized label, e.g. {"en": "Name"}.'),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("required", models.BooleanField(default=False)),
                (
                    "validater",
                    models.CharField(blank=True, default="", help_text="Regular expression.", max_length=512),
                ),
                (
                    "values",
                    models.JSONField(
                        blank=True, help_text="Options for select, radio and checkbox fields.", null=True
                    ),
                ),
                ("filters", models.JSONField(blank=True, help_text="Conditional display rule.", null=True)),
                (
                    "enable_other",
                    models.BooleanField(default=False, help_text="Radio fields accept a free-text answer."),
                ),
                ("order", models.PositiveIntegerField(default=0)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="form_fields",
                        to="registrations.event",
                    ),
                ),
                (
                    "ticket",
                    models.ForeignKey(
                        blank=True,
                        help_text=(
                            "Restrict the field to one ticket. Empty means the field applies to every ticket "
                            "of the event."
                        ),
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="form_fields",
                        to="registrations.ticket",
                    ),
                ),
            ],
            options={
                "ordering": ["order", "created_at"],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("email", models.EmailField(db_index=True, max_length=254)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("cancelled", "Cancelled")],
                        db_index=True,
                        default="confirmed",
                        max_length=16,
                    ),
                ),
                ("check_in_code", models.CharField(editable=False, max_length=32, unique=True)),
                (
                    "edit_token_hash",
                    models.CharField(blank=True, editable=False, max_length=64, null=True, unique=True),
                ),
                ("edit_token_expiry", models.DateTimeField(blank=True, editable=False, null=True)),
                ("cancellation_reason", models.TextField(blank=True, default="")),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="registrations",
                        to="registrations.event",
                    ),
                ),
                (
                    "ticket",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="registrations",
                        to="registrations.ticket",
                    ),
                ),
                (
                    "referred_by",
                    models.ForeignKey(
                        blank=True,
                        editable=False,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="referrals",
                        to="registrations.registration",
                    ),
                ),
                (
                    "invitation_code",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="registrations",
                        to="registrations.invitationcode",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "cancelled"), _negated=True),
                        fields=("event", "email"),
                        name="unique_live_registration_per_email",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="RegistrationData",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("value", models.JSONField(null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "registration",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="data",
                        to="registrations.registration",
                    ),
                ),
                (
                    "field",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="registrations.formfield",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("registration", "field"), name="unique_registration_field_value")
                ],
            },
        ),
        migrations.CreateModel(
            name="EditTokenRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "registration",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="edit_token_requests",
                        to="registrations.registration",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
