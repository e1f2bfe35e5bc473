from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Union

from email_validator import validate_email as _validate_email, EmailNotValidError

from db.errors import StudioError
from db.resources import ResourceClient, is_blank

logger = logging.getLogger(__name__)


CONSULTATION_FIELDS = ["name", "email", "phone", "preferred_date", "project_type"]
CONTACT_FIELDS = ["name", "email", "subject", "message"]

GENERIC_FAILURE = "Failed to submit. Please try again."


@dataclass
class ConsultationForm:
    name: str = ""
    email: str = ""
    phone: str = ""
    preferred_date: Optional[date] = None
    project_type: str = ""
    message: str = ""

    required = CONSULTATION_FIELDS
    acknowledgement = (
        "Consultation Request Received!",
        "We'll contact you within 24 hours to confirm your appointment.",
    )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name.strip(),
            "email": self.email.strip(),
            "phone": self.phone.strip(),
            "preferred_date": self.preferred_date.isoformat() if self.preferred_date else None,
            "project_type": self.project_type,
            "message": self.message.strip() or None,
        }


@dataclass
class ContactForm:
    name: str = ""
    email: str = ""
    phone: str = ""
    subject: str = ""
    message: str = ""

    required = CONTACT_FIELDS
    acknowledgement = (
        "Message Sent!",
        "Thank you for reaching out. We'll get back to you soon.",
    )

    def to_payload(self) -> Dict[str, Any]:
        payload = {k: v.strip() for k, v in asdict(self).items()}
        payload["phone"] = payload["phone"] or None
        return payload


IntakeForm = Union[ConsultationForm, ContactForm]


@dataclass
class IntakeResult:
    success: bool
    error: Optional[str] = None
    row: Optional[Dict[str, Any]] = None


# ----------------- VALIDATORS ------------------------

def validate_email(email: str) -> bool:
    try:
        _validate_email(email, check_deliverability=False)
        return True
    except EmailNotValidError:
        return False


def get_missing_fields(form: IntakeForm) -> List[str]:
    return [f for f in form.required if is_blank(getattr(form, f, None))]


# ----------------- SUBMIT ------------------------

def submit_intake(form: IntakeForm, resource: ResourceClient) -> IntakeResult:
    """One insert per submit. No retry; the visitor sees one generic failure."""
    missing = get_missing_fields(form)
    if missing:
        return IntakeResult(False, "Please fill in: " + ", ".join(missing))
    if not validate_email(form.email.strip()):
        return IntakeResult(False, "Invalid email. Please try format: name@example.com")

    try:
        row = resource.insert(form.to_payload())
    except StudioError as e:
        logger.error("Intake insert into %s failed: %s", resource.table, e.message)
        return IntakeResult(False, GENERIC_FAILURE)

    return IntakeResult(True, row=row)
