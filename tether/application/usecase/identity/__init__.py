"""Identity linking use cases."""

from .get_history import GetHistoryUseCase
from .get_linking_status import GetLinkingStatusUseCase
from .link_provider import LinkProviderUseCase
from .record_creative_upload import RecordCreativeUploadUseCase
from .unlink_provider import UnlinkProviderUseCase

__all__ = [
    "GetHistoryUseCase",
    "GetLinkingStatusUseCase",
    "LinkProviderUseCase",
    "RecordCreativeUploadUseCase",
    "UnlinkProviderUseCase",
]
