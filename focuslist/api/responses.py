"""
Response shapes shared by the mutation endpoints
"""
from pydantic import BaseModel


class IdResponse(BaseModel):
    id: int


class SuccessResponse(BaseModel):
    success: bool = True


class DeletedCountResponse(BaseModel):
    deleted_count: int
