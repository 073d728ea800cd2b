"""
Domain exceptions - Semantic error types for the registration flow.

This module defines domain-specific exceptions that communicate
flow rule violations without leaking infrastructure details.
Remote failures are never raised: they travel as RemoteOutcome values.
"""


class FlowError(Exception):
    """Base class for registration flow errors."""

    pass


class InvalidTransition(FlowError):
    """The current screen does not accept the triggered event."""

    def __init__(self, screen: str, event: str) -> None:
        super().__init__(f"Screen {screen!r} does not accept event {event!r}")
        self.screen = screen
        self.event = event


class UnknownFormField(FlowError):
    """An edit named a field the flow's form does not have."""

    def __init__(self, flow: str, field: str) -> None:
        super().__init__(f"{flow} form has no field {field!r}")
        self.flow = flow
        self.field = field


class FlowNotFound(FlowError):
    """No display session is registered under the given id."""

    pass


class ReadOnlyFormField(FlowError):
    """An edit named a field that only the flow itself may set."""

    def __init__(self, flow: str, field: str) -> None:
        super().__init__(f"{flow} form field {field!r} cannot be edited")
        self.flow = flow
        self.field = field


class InvalidFieldValue(FlowError):
    """A value does not fit the type of the form field it was written to."""

    def __init__(self, flow: str, field: str, value: object) -> None:
        super().__init__(f"Invalid value {value!r} for {flow} form field {field!r}")
        self.flow = flow
        self.field = field
        self.value = value
