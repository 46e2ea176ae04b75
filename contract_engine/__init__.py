"""
CONTRACT LIFECYCLE & AMENDMENT ACCOUNTING ENGINE
Deadlines, amendments, financial entries and currency handling for
government contract management.
"""

from .exceptions import AuthenticationFailed, ExternalFailure, InvalidAmendment, InvalidInput
from .processor import ContractProcessor

__all__ = [
    "ContractProcessor",
    "InvalidInput",
    "InvalidAmendment",
    "ExternalFailure",
    "AuthenticationFailed",
]
