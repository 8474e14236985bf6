"""Outbound email for the league."""

from prediction_league.alerting.communications import CommunicationsAgent, new_email
from prediction_league.alerting.email import Email, EmailClient, Identity, MailgunClient
from prediction_league.alerting.queue import EmailQueue

__all__ = [
    "CommunicationsAgent",
    "Email",
    "EmailClient",
    "EmailQueue",
    "Identity",
    "MailgunClient",
    "new_email",
]
