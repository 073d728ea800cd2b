"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
The display layer only ever sees these projections of the domain state.
"""

from dataclasses import asdict
from typing import Any

from pydantic import BaseModel, Field

from ticketflow.domain.flow import Action, OtpFlowState, Overlay, ViewState
from ticketflow.domain.forms import Flow, PaymentStatus
from ticketflow.domain.screens import Screen


class FieldEditRequest(BaseModel):
    """Request model for a single form field edit."""

    flow: Flow
    field: str = Field(..., min_length=1, description="Form field name, e.g. full_name")
    value: str | bool


class ActionRequest(BaseModel):
    """Request model for a button press."""

    action: Action


class OverlayRequest(BaseModel):
    """Request model for opening (overlay set) or closing (null) an overlay."""

    overlay: Overlay | None = None


class StudentFormModel(BaseModel):
    email: str
    otp: str
    full_name: str
    registration_number: str
    department: str
    year: str
    phone_number: str
    transaction_id: str
    payment_confirmed: bool
    payment_status: PaymentStatus


class GuestFormModel(BaseModel):
    email: str
    otp: str
    name: str
    roll_number: str
    college: str
    department: str
    phone_number: str
    pass_generated: bool
    pass_id: str


class ProfileFormModel(BaseModel):
    student: StudentFormModel
    guest: GuestFormModel


class OtpStateModel(BaseModel):
    can_resend: bool
    resend_timer: int
    otp_error: str | None

    @classmethod
    def from_domain(cls, state: OtpFlowState) -> "OtpStateModel":
        return cls(**asdict(state))


class ViewResponse(BaseModel):
    """Everything the display needs to render the current screen."""

    screen: Screen
    form: ProfileFormModel
    otp: dict[Flow, OtpStateModel]
    loading: bool
    overlay: Overlay | None
    actions: list[Action] = Field(default_factory=list, description="Buttons that move the current screen")

    @classmethod
    def from_domain(cls, view: ViewState) -> "ViewResponse":
        form: dict[str, Any] = asdict(view.form)
        return cls(
            screen=view.screen,
            form=ProfileFormModel.model_validate(form),
            otp={flow: OtpStateModel.from_domain(state) for flow, state in view.otp.items()},
            loading=view.loading,
            overlay=view.overlay,
            actions=view.actions,
        )


class FlowCreatedResponse(BaseModel):
    """Response model for a newly started flow."""

    flow_id: str
    view: ViewResponse


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
