"""
Typed errors shared by the three services.

Every error carries the HTTP status the handlers answer with:

    StockroomError
    +-- ValidationError          400
    +-- NotFoundError            404
    +-- ConflictError            409
    +-- InsufficientStockError   400
    +-- StorageError             500
    +-- ImmutableRecordError     500
"""

from typing import Any, Dict

from fastapi import status


class StockroomError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def extra(self) -> Dict[str, Any]:
        """Structured context merged into the error envelope."""
        return {}


class ValidationError(StockroomError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(StockroomError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(StockroomError):
    status_code = status.HTTP_409_CONFLICT


class InsufficientStockError(StockroomError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, available: int, requested: int):
        super().__init__("Insufficient stock")
        self.available = available
        self.requested = requested

    def extra(self) -> Dict[str, Any]:
        return {"available": self.available, "requested": self.requested}


class StorageError(StockroomError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ImmutableRecordError(StockroomError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, entity: str, record_id: Any):
        super().__init__(f"{entity} {record_id} is immutable")
        self.entity = entity
        self.record_id = record_id
