from typing import Optional, Any
from enum import Enum

# ------------------------------- Base Models ------------------------------- #

class ApiStatus(str, Enum):
    """Standard API and cycle result statuses"""
    SUCCESS = "success"
    ERROR = "error"
    SKIPPED = "skipped"
    CONFLICT = "conflict"

# ------------------------------- Response Helpers ------------------------------- #

def error_response(
    message: str = "An error occurred",
    status: ApiStatus = ApiStatus.ERROR,
    data: Any = None,
    timestamp: Optional[str] = None
) -> dict:
    """Helper function to create a standardized error response"""
    return {
        "status": status.value,
        "message": message,
        "data": data,
        "timestamp": timestamp
    }
