"""
Custom Exceptions for the Flow Builder.

These exceptions provide clear, specific error handling for business logic scenarios.
"""


class FlowDefinitionError(Exception):
    """
    Raised when a normalized flow request cannot be mapped onto Klaviyo's
    flow-definition schema.

    Validation has already passed at this point, so this signals a combination
    the definition format does not support (for example a step that repeats a
    tracking parameter name). The message is shown to the user as-is.

    Example:
        Step 2 sets utm_source twice -> FlowDefinitionError(
            "Step 2 has duplicate tracking parameter 'utm_source'.", step_number=2
        )
    """
    def __init__(self, message: str, step_number: int = None):
        self.step_number = step_number
        self.message = message
        super().__init__(self.message)
