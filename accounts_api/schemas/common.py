# File: accounts_api/schemas/common.py

from typing import Any

from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Envelope returned by every successful endpoint."""

    statusCode: int = 200
    data: Any = None
    message: str = "Success"
    success: bool = True

    @classmethod
    def ok(cls, data: Any, message: str, status_code: int = 200) -> dict:
        return cls(statusCode=status_code, data=data, message=message).model_dump(mode="json")
