from .consume_guest_quota import ConsumeGuestQuota
from .get_guest_quota import GetGuestQuota
from .dtos import GuestQuotaCommandDTO, GuestQuotaResponseDTO

__all__ = [
    "ConsumeGuestQuota",
    "GetGuestQuota",
    "GuestQuotaCommandDTO",
    "GuestQuotaResponseDTO",
]
