import typing as t
from io import BytesIO

import qrcode
from django.conf import settings
from django.urls import reverse

if t.TYPE_CHECKING:
    from registrations.models import Event


def qr_code_url(check_in_code: str) -> str:
    """Absolute URL of the PNG QR code for a check-in code."""
    path = reverse("api:registration_qr_code", kwargs={"check_in_code": check_in_code})
    return f"{settings.SERVICE_URL}{path}"


def referral_link(event: "Event", check_in_code: str) -> str:
    return f"{settings.FRONTEND_BASE_URL}/{event.slug}?ref={check_in_code}"


def render_qr_png(data: str) -> bytes:
    """Render ``data`` as a PNG QR code."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffered = BytesIO()
    img.save(buffered, "PNG")
    return buffered.getvalue()
