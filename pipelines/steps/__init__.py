# Namespace for pipeline steps
from .validate_files import ValidateFiles  # noqa: F401
from .normalize_export import NormalizeExport  # noqa: F401
from .persist_owner_profile import PersistOwnerProfile  # noqa: F401
from .resolve_connections import ResolveConnections  # noqa: F401
from .persist_connections import PersistConnections  # noqa: F401
from .persist_history import PersistPositions, PersistEducation, PersistSkills  # noqa: F401
