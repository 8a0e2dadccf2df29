from .database import SQLiteRecordDB, StoreUnavailableError
from .patient_store import PatientStore, new_patient_id

__all__ = [
    "PatientStore",
    "SQLiteRecordDB",
    "StoreUnavailableError",
    "new_patient_id",
]
