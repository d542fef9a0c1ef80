from .blob import BlobStorePort
from .repos import ProfilesRepoPort, LookupRepoPort, ConnectionsRepoPort
from .search import EmbedderPort, VectorIndexPort
from .source import TriggerSourcePort

__all__ = [
    "BlobStorePort",
    "ProfilesRepoPort",
    "LookupRepoPort",
    "ConnectionsRepoPort",
    "EmbedderPort",
    "VectorIndexPort",
    "TriggerSourcePort",
]
