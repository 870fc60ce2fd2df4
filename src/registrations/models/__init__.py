from .event import Event
from .form_field import FormField
from .invitation import InvitationCode
from .registration import EditTokenRequest, Registration, RegistrationData
from .ticket import Ticket

__all__ = [
    "EditTokenRequest",
    "Event",
    "FormField",
    "InvitationCode",
    "Registration",
    "RegistrationData",
    "Ticket",
]
