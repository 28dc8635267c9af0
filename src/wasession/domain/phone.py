"""Phone number to destination-id normalization."""

from __future__ import annotations

import re
from dataclasses import dataclass

from wasession.errors import ErrorKind, ServiceError
from wasession.settings import PhonePolicy

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class Destination:
    """Normalized recipient.

    Attributes:
        phone: Digits sent back to the caller as ``to``.
        chat_id: Identifier handed to the session client.
    """

    phone: str
    chat_id: str


def normalize_phone(raw: str, policy: PhonePolicy) -> Destination:
    """Normalize a caller-supplied phone number.

    Strips every non-digit; a number of exactly ``policy.local_length``
    digits gets ``policy.default_country_code`` prepended. The chat id is
    the digits plus ``policy.chat_id_suffix``.

    Args:
        raw: Phone as typed by the caller (punctuation allowed).
        policy: Locale policy from settings.

    Returns:
        Destination with the normalized digits and chat id.

    Raises:
        ServiceError: VALIDATION if no digits remain.
    """
    digits = _NON_DIGITS.sub("", raw)
    if not digits:
        raise ServiceError(ErrorKind.VALIDATION, "Phone must contain digits")

    if len(digits) == policy.local_length:
        digits = policy.default_country_code + digits

    return Destination(phone=digits, chat_id=digits + policy.chat_id_suffix)
