"""User RPC routes."""
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ...schemas.user import (
    CreateUserRequest,
    DeleteUserRequest,
    DeleteUserResponse,
    GetUserRequest,
    ListUsersRequest,
    UpdateUserRequest,
    UserRecord,
)
from ...services.user_service import UserService, get_user_service

router = APIRouter(prefix="/rpc/UserService", tags=["Users"])

NDJSON_MEDIA_TYPE = "application/x-ndjson"


async def _ndjson(records: AsyncIterator[UserRecord]) -> AsyncIterator[str]:
    async for record in records:
        yield record.model_dump_json(by_alias=True) + "\n"


@router.post("/ListUsers")
async def list_users(
    list_request: ListUsersRequest,
    request: Request,
    service: UserService = Depends(get_user_service)
):
    """Stream one page of users ordered by first name."""
    result = await service.list_users(list_request, is_cancelled=request.is_disconnected)
    records = result.unwrap()

    return StreamingResponse(_ndjson(records), media_type=NDJSON_MEDIA_TYPE)


@router.post("/GetUser", response_model=UserRecord)
async def get_user(
    get_request: GetUserRequest,
    service: UserService = Depends(get_user_service)
):
    """Get a user by ID."""
    result = await service.get_user(get_request)
    return result.unwrap()


@router.post("/CreateUser", response_model=UserRecord)
async def create_user(
    create_request: CreateUserRequest,
    service: UserService = Depends(get_user_service)
):
    """Create a new user."""
    result = await service.create_user(create_request)
    return result.unwrap()


@router.post("/UpdateUser", response_model=UserRecord)
async def update_user(
    update_request: UpdateUserRequest,
    service: UserService = Depends(get_user_service)
):
    """Overwrite a user's profile and active flag."""
    result = await service.update_user(update_request)
    return result.unwrap()


@router.post("/DeleteUser", response_model=DeleteUserResponse)
async def delete_user(
    delete_request: DeleteUserRequest,
    service: UserService = Depends(get_user_service)
):
    """Mark a user as inactive."""
    result = await service.delete_user(delete_request)
    return result.unwrap()
