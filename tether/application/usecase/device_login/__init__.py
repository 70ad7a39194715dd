"""Device login use cases."""

from .issue_ticket import IssueTicketUseCase
from .redeem_ticket import RedeemTicketUseCase

__all__ = ["IssueTicketUseCase", "RedeemTicketUseCase"]
