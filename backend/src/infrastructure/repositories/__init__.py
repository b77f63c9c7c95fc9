from .clearance_repository import ClearanceRecordStore
from .student_repository import StudentRepository

__all__ = ["ClearanceRecordStore", "StudentRepository"]
