from .base import Base
from .models import ClientStorageEntry

__all__ = ["Base", "ClientStorageEntry"]
