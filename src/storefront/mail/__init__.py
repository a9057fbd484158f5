"""Transactional email for Storefront."""

from .templates import make_a_nice_email, password_reset_email, reset_link
from .transport import (
    MailDeliveryError,
    MailTransport,
    NullMailTransport,
    SMTPMailTransport,
    get_mail_transport,
    set_mail_transport,
)

__all__ = [
    "MailDeliveryError",
    "MailTransport",
    "NullMailTransport",
    "SMTPMailTransport",
    "get_mail_transport",
    "make_a_nice_email",
    "password_reset_email",
    "reset_link",
    "set_mail_transport",
]
