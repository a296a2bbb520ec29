# Application Scheduler Package
from .memory_model import MemoryModel
from .service import Scheduler

__all__ = ["MemoryModel", "Scheduler"]
