"""
Error taxonomy for the Contract Engine.

InvalidInput is a ValueError so entry points that already map ValueError to
a 400 response keep working.
"""


class ContractEngineError(Exception):
    """Base class for all engine errors."""


class InvalidInput(ContractEngineError, ValueError):
    """A required field is missing or malformed."""


class InvalidAmendment(InvalidInput):
    """An amendment cannot be applied to the given contract."""


class ExternalFailure(ContractEngineError):
    """The persistence or authentication backend returned an error.

    The backend's message is kept verbatim so it can be shown to the operator.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationFailed(ExternalFailure):
    """Sign-in rejected because of bad credentials."""

    FRIENDLY_MESSAGE = "Usuário ou senha incorretos. Verifique suas credenciais."

    def __init__(self, status_code: int | None = None):
        super().__init__(self.FRIENDLY_MESSAGE, status_code)
