from .memory_store import MemoryEmployeeStore
from .store import DuplicateEntityError, EmployeeStore, StorageError
from .writer import EntityWriter, WriteResult

__all__ = [
    "DuplicateEntityError",
    "EmployeeStore",
    "EntityWriter",
    "MemoryEmployeeStore",
    "StorageError",
    "WriteResult",
]
