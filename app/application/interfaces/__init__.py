"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure.
"""

from app.application.interfaces.repositories import (
    IRefreshTokenRepository,
    IUserRepository,
)
from app.application.interfaces.services import IEmailSender, ISecurityNotifier

__all__ = [
    "IEmailSender",
    "IRefreshTokenRepository",
    "ISecurityNotifier",
    "IUserRepository",
]
