"""Category-specific input fields and synthetic step results."""

from __future__ import annotations

import random
import string
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .errors import InvalidStepInputError
from .models import Step, StepCategory, utcnow

FieldKind = Literal["text", "email", "tel", "textarea", "select", "number"]


class InputField(BaseModel):
    """A single input collected from the user before a step runs."""

    name: str
    label: str
    kind: FieldKind = "text"
    required: bool = False
    options: List[str] = Field(default_factory=list)


INPUT_FIELDS: Dict[StepCategory, List[InputField]] = {
    StepCategory.DATA_INPUT: [
        InputField(name="customerName", label="Customer Name", required=True),
        InputField(name="email", label="Email Address", kind="email", required=True),
        InputField(name="phone", label="Phone Number", kind="tel"),
        InputField(name="requirements", label="Requirements", kind="textarea"),
    ],
    StepCategory.AI: [
        InputField(
            name="documentType",
            label="Document Type",
            kind="select",
            required=True,
            options=["Contract", "Invoice", "Report"],
        ),
        InputField(
            name="analysisType",
            label="Analysis Type",
            kind="select",
            required=True,
            options=["Extract Data", "Classify", "Summarize"],
        ),
    ],
    StepCategory.API: [
        InputField(
            name="crmSystem",
            label="CRM System",
            kind="select",
            required=True,
            options=["Salesforce", "HubSpot", "Pipedrive"],
        ),
        InputField(
            name="recordType",
            label="Record Type",
            kind="select",
            required=True,
            options=["Lead", "Contact", "Opportunity"],
        ),
    ],
    StepCategory.DOCUMENT: [
        InputField(
            name="template",
            label="Template",
            kind="select",
            required=True,
            options=["Contract Template", "Invoice Template", "Report Template"],
        ),
        InputField(
            name="format",
            label="Output Format",
            kind="select",
            required=True,
            options=["PDF", "Word", "HTML"],
        ),
    ],
    StepCategory.NOTIFICATION: [
        InputField(name="recipient", label="Recipient", required=True),
        InputField(
            name="channel",
            label="Channel",
            kind="select",
            required=True,
            options=["Email", "SMS", "Slack"],
        ),
        InputField(name="message", label="Message", kind="textarea", required=True),
    ],
    StepCategory.DECISION: [
        InputField(
            name="criteria", label="Decision Criteria", kind="textarea", required=True
        ),
        InputField(
            name="threshold", label="Approval Threshold", kind="number", required=True
        ),
    ],
}

_SAMPLE_VALUES = {
    "text": "Sample",
    "email": "someone@example.com",
    "tel": "+44 20 7123 4567",
    "textarea": "Sample details",
    "number": 75,
}


def fields_for_category(category: Optional[StepCategory]) -> List[InputField]:
    if category is None:
        return []
    return list(INPUT_FIELDS.get(category, []))


def sample_input(category: Optional[StepCategory]) -> Dict[str, Any]:
    """Build input that satisfies every field of ``category``."""
    data: Dict[str, Any] = {}
    for field in fields_for_category(category):
        if field.kind == "select":
            data[field.name] = field.options[0]
        else:
            data[field.name] = _SAMPLE_VALUES[field.kind]
    return data


def validate_step_input(step: Step, data: Optional[Dict[str, Any]]) -> None:
    """Raise :class:`InvalidStepInputError` when ``data`` misses required fields."""
    data = data or {}
    missing = []
    for field in fields_for_category(step.category):
        value = data.get(field.name)
        if value is None or (isinstance(value, str) and not value.strip()):
            if field.required:
                missing.append(field.name)
            continue
        if field.kind == "select" and value not in field.options:
            raise InvalidStepInputError(
                step.id,
                f"{field.label} must be one of {', '.join(field.options)}",
            )
    if missing:
        raise InvalidStepInputError(
            step.id, f"missing required fields: {', '.join(missing)}", missing
        )


def _short_id(rng: random.Random, length: int = 9) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(rng.choice(alphabet) for _ in range(length))


def generate_step_result(
    category: Optional[StepCategory],
    input_data: Optional[Dict[str, Any]],
    rng: random.Random,
) -> Dict[str, Any]:
    """Return a synthetic result whose shape depends only on ``category``."""
    data = dict(input_data or {})

    if category == StepCategory.DATA_INPUT:
        return {"collected": data, "timestamp": utcnow().isoformat()}
    if category == StepCategory.AI:
        return {
            "confidence": rng.random() * 0.3 + 0.7,
            "extracted_data": data,
            "processing_time": rng.random() * 2000 + 500,
        }
    if category == StepCategory.API:
        return {
            "success": True,
            "record_id": _short_id(rng),
            "response_time": rng.random() * 1000 + 200,
        }
    if category == StepCategory.DOCUMENT:
        return {
            "document_id": _short_id(rng),
            "pages": rng.randint(1, 5),
            "format": "PDF",
        }
    if category == StepCategory.NOTIFICATION:
        return {"sent": True, "channel": "email", "message_id": _short_id(rng)}
    if category == StepCategory.DECISION:
        return {
            "decision": "approved" if rng.random() > 0.3 else "review_required",
            "confidence": rng.random() * 0.4 + 0.6,
        }
    return {"processed": True}
