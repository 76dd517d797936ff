from .router import router
from .dependencies import require_admin

__all__ = ["router", "require_admin"]
