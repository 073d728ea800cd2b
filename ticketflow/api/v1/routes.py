"""
API v1 routes.

Defines the REST endpoints the display layer uses to drive a flow:
it starts a flow, sends field edits, button presses and overlay
changes, and re-renders the view returned by every call.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from ticketflow.adapters.repository.memory import InMemoryFlowRepository
from ticketflow.api.dependencies import get_orchestrator, get_repository, new_orchestrator
from ticketflow.api.models import (
    ActionRequest,
    ErrorResponse,
    FieldEditRequest,
    FlowCreatedResponse,
    OverlayRequest,
    ViewResponse,
)
from ticketflow.domain.exceptions import (
    FlowNotFound,
    InvalidFieldValue,
    InvalidTransition,
    ReadOnlyFormField,
    UnknownFormField,
)
from ticketflow.domain.flow import FlowOrchestrator

router = APIRouter(tags=["v1"])


@router.post(
    "/flows",
    response_model=FlowCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a new flow",
    description="Create a registration flow on the home screen.",
)
async def create_flow(
    repository: InMemoryFlowRepository = Depends(get_repository),
    orchestrator: FlowOrchestrator = Depends(new_orchestrator),
) -> FlowCreatedResponse:
    flow_id = repository.add(orchestrator)
    return FlowCreatedResponse(flow_id=flow_id, view=ViewResponse.from_domain(orchestrator.view()))


@router.get(
    "/flows/{flow_id}",
    response_model=ViewResponse,
    responses={404: {"model": ErrorResponse, "description": "Flow not found"}},
    summary="Get the current view",
)
async def get_view(orchestrator: FlowOrchestrator = Depends(get_orchestrator)) -> ViewResponse:
    return ViewResponse.from_domain(orchestrator.view())


@router.delete(
    "/flows/{flow_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "Flow not found"}},
    summary="End a flow",
    description="Forget the flow. Flows left open are evicted once idle.",
)
async def delete_flow(
    flow_id: str,
    repository: InMemoryFlowRepository = Depends(get_repository),
) -> None:
    try:
        repository.remove(flow_id)
    except FlowNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Flow not found",
        ) from None


@router.post(
    "/flows/{flow_id}/fields",
    response_model=ViewResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Flow not found"},
        422: {"description": "Unknown, read-only or mistyped field"},
    },
    summary="Edit a form field",
)
async def edit_field(
    request_data: FieldEditRequest,
    orchestrator: FlowOrchestrator = Depends(get_orchestrator),
) -> ViewResponse:
    """
    Overwrite one field of the student or guest form.

    - **flow**: "student" or "guest"
    - **field**: field name, e.g. "email" or "full_name"
    - **value**: new value (string, or boolean for payment_confirmed)

    payment_status, pass_generated and pass_id are set by the flow itself
    and cannot be edited.
    """
    try:
        orchestrator.edit(request_data.flow, request_data.field, request_data.value)
    except (UnknownFormField, ReadOnlyFormField, InvalidFieldValue) as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from None
    return ViewResponse.from_domain(orchestrator.view())


@router.post(
    "/flows/{flow_id}/actions",
    response_model=ViewResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Flow not found"},
        409: {"model": ErrorResponse, "description": "Action not available on this screen"},
    },
    summary="Press a button",
    description="Dispatch a button press. Presses whose required fields are "
    "missing are ignored and the unchanged view is returned.",
)
async def press_action(
    request_data: ActionRequest,
    orchestrator: FlowOrchestrator = Depends(get_orchestrator),
) -> ViewResponse:
    try:
        await orchestrator.press(request_data.action)
    except InvalidTransition as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from None
    return ViewResponse.from_domain(orchestrator.view())


@router.post(
    "/flows/{flow_id}/overlay",
    response_model=ViewResponse,
    responses={404: {"model": ErrorResponse, "description": "Flow not found"}},
    summary="Open or close an overlay",
)
async def set_overlay(
    request_data: OverlayRequest,
    orchestrator: FlowOrchestrator = Depends(get_orchestrator),
) -> ViewResponse:
    if request_data.overlay is None:
        orchestrator.close_overlay()
    else:
        orchestrator.open_overlay(request_data.overlay)
    return ViewResponse.from_domain(orchestrator.view())
