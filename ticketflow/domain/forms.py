"""
Form State Store - all user-entered values for both flows.

The student and guest journeys each own a separate sub-record, so the
email, code and phone typed in one flow never leak into the other.
Records are immutable; the store swaps in a new record on every merge.
"""

import re
from collections.abc import Mapping
from dataclasses import Field, dataclass, field, fields, replace
from enum import Enum
from typing import Any

from .exceptions import InvalidFieldValue, ReadOnlyFormField, UnknownFormField


class Flow(str, Enum):
    """The two end-to-end journeys."""

    STUDENT = "student"
    GUEST = "guest"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(frozen=True)
class StudentForm:
    """Paid student ticket: verification, profile and payment fields."""

    email: str = ""
    otp: str = ""
    full_name: str = ""
    registration_number: str = ""
    department: str = ""
    year: str = ""
    phone_number: str = ""
    transaction_id: str = ""
    payment_confirmed: bool = False
    payment_status: PaymentStatus = PaymentStatus.PENDING

    def missing_profile_fields(self) -> list[str]:
        required = ("full_name", "registration_number", "department", "year", "phone_number")
        return [name for name in required if not getattr(self, name)]


@dataclass(frozen=True)
class GuestForm:
    """Free guest pass: verification and profile fields plus the issued pass."""

    email: str = ""
    otp: str = ""
    name: str = ""
    roll_number: str = ""
    college: str = ""
    department: str = ""
    phone_number: str = ""
    pass_generated: bool = False
    pass_id: str = ""

    def missing_profile_fields(self) -> list[str]:
        required = ("name", "roll_number", "college", "department", "phone_number")
        return [name for name in required if not getattr(self, name)]


@dataclass(frozen=True)
class ProfileForm:
    """Both flows' records; the inactive one is simply unused."""

    student: StudentForm = field(default_factory=StudentForm)
    guest: GuestForm = field(default_factory=GuestForm)

    def for_flow(self, flow: Flow) -> StudentForm | GuestForm:
        return self.student if flow is Flow.STUDENT else self.guest


@dataclass(frozen=True)
class FormMutation:
    """
    Change to apply to the store alongside a screen transition.

    An empty mutation (no updates, no reset) leaves the store untouched.
    """

    flow: Flow | None = None
    updates: Mapping[str, Any] = field(default_factory=dict)
    reset: bool = False


NO_CHANGE = FormMutation()

_NON_DIGITS = re.compile(r"\D")

# Written by state transitions and the orchestrator, never by the display.
SET_BY_FLOW = frozenset({"payment_status", "pass_generated", "pass_id"})


def _coerce(flow: Flow, spec: Field, value: Any) -> Any:
    if spec.type is PaymentStatus:
        try:
            return PaymentStatus(value)
        except ValueError:
            raise InvalidFieldValue(flow.value, spec.name, value) from None
    if not isinstance(value, spec.type):
        raise InvalidFieldValue(flow.value, spec.name, value)
    # Codes are numeric; anything else typed into the box is dropped.
    if spec.name == "otp":
        return _NON_DIGITS.sub("", value)
    return value


class FormStore:
    """Holds the ProfileForm and applies merges, resets and mutations."""

    def __init__(self) -> None:
        self._form = ProfileForm()

    def get(self) -> ProfileForm:
        return self._form

    def merge(self, flow: Flow, partial: Mapping[str, Any]) -> ProfileForm:
        """
        Overwrite named fields of one flow's record.

        Args:
            flow: Which sub-record to update
            partial: Field name to new value; an empty mapping changes nothing

        Returns:
            The updated ProfileForm

        Raises:
            UnknownFormField: If a name is not a field of the flow's form
            InvalidFieldValue: If a value does not fit the field's type
        """
        if not partial:
            return self._form

        current = self._form.for_flow(flow)
        known = {f.name: f for f in fields(current)}
        for name in partial:
            if name not in known:
                raise UnknownFormField(flow.value, name)

        updated = replace(
            current,
            **{name: _coerce(flow, known[name], value) for name, value in partial.items()},
        )
        self._form = replace(self._form, **{flow.value: updated})
        return self._form

    def edit(self, flow: Flow, name: str, value: Any) -> ProfileForm:
        """
        Apply one edit coming from the display.

        Raises:
            ReadOnlyFormField: If the field is one only the flow sets
        """
        if name in SET_BY_FLOW and hasattr(self._form.for_flow(flow), name):
            raise ReadOnlyFormField(flow.value, name)
        return self.merge(flow, {name: value})

    def reset_all(self) -> ProfileForm:
        """Return every field of both flows to its default."""
        self._form = ProfileForm()
        return self._form

    def apply(self, mutation: FormMutation) -> ProfileForm:
        if mutation.reset:
            return self.reset_all()
        if mutation.flow is None:
            return self._form
        return self.merge(mutation.flow, mutation.updates)
