"""Domain sub-clients built on the shared request pipeline."""

from edgelink.clients.ai import AiApiClient
from edgelink.clients.billing import BillingApiClient
from edgelink.clients.dialectic import DialecticAction, DialecticApiClient
from edgelink.clients.notifications import NotificationApiClient
from edgelink.clients.organizations import OrganizationApiClient
from edgelink.clients.users import UserApiClient
from edgelink.clients.wallet import WalletApiClient

__all__ = [
    "AiApiClient",
    "BillingApiClient",
    "DialecticAction",
    "DialecticApiClient",
    "NotificationApiClient",
    "OrganizationApiClient",
    "UserApiClient",
    "WalletApiClient",
]
