"""User account endpoints.

``/me`` routes are declared before ``/{user_id}`` so that ``me`` is never
captured as an id.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from ...core.permissions import UserAction
from ...deps import DatabaseSessionDependency, ensure_may_act_on, require_requester
from ...models import User
from ...repositories import UserSort
from ...schemas import PasswordChange, UserCreate, UserPublic, UserUpdate
from ...schemas.projection import parse_fields, project
from ...services import UserService

router = APIRouter(prefix="/users", tags=["users"])

DEFAULT_PAGE_SIZE = 30
MAX_PAGE_SIZE = 100
# Keeps the row offset within a signed 64-bit SQL integer.
MAX_PAGE = (2**63 - 1) // MAX_PAGE_SIZE
TOTAL_COUNT_HEADER = "X-Total-Count"

ListRequester = Annotated[User, Depends(require_requester(UserAction.LIST))]
SelfReader = Annotated[User, Depends(require_requester(UserAction.READ_SELF))]
SelfEditor = Annotated[User, Depends(require_requester(UserAction.UPDATE_SELF))]
OwnPasswordHolder = Annotated[User, Depends(require_requester(UserAction.CHANGE_OWN_PASSWORD))]
ProfileEditor = Annotated[User, Depends(require_requester(UserAction.UPDATE))]
PasswordHolder = Annotated[User, Depends(require_requester(UserAction.CHANGE_PASSWORD))]
AccountRemover = Annotated[User, Depends(require_requester(UserAction.DELETE))]

PageQuery = Annotated[int, Query(ge=1, le=MAX_PAGE, description="1-based page number.")]
LimitQuery = Annotated[
    int,
    Query(ge=1, le=MAX_PAGE_SIZE, description="Maximum number of users per page."),
]
SearchQuery = Annotated[
    str | None,
    Query(max_length=255, description="Case-insensitive substring matched against names."),
]
SortQuery = Annotated[UserSort, Query(description="Ordering; prefix with '-' for descending.")]
FieldsQuery = Annotated[
    str | None,
    Query(description="Comma-separated attributes to return in addition to 'id'."),
]


def _map_user(user: User) -> UserPublic:
    return UserPublic.model_validate(user)


@router.get(
    "",
    response_model=list[UserPublic],
    summary="Search and page through users (admin only)",
)
async def list_users(
    session: DatabaseSessionDependency,
    _: ListRequester,
    page: PageQuery = 1,
    limit: LimitQuery = DEFAULT_PAGE_SIZE,
    q: SearchQuery = None,
    sort: SortQuery = UserSort.CREATED_AT_DESC,
    fields: FieldsQuery = None,
) -> JSONResponse:
    selected = parse_fields(fields)
    users, total = await UserService(session).list_users(q=q, sort=sort, page=page, limit=limit)
    return JSONResponse(
        content=[project(_map_user(user), selected) for user in users],
        headers={TOTAL_COUNT_HEADER: str(total)},
    )


@router.get("/me", response_model=UserPublic, summary="Return the authenticated user")
async def read_current_user(current_user: SelfReader) -> UserPublic:
    return _map_user(current_user)


@router.put("/me", response_model=UserPublic, summary="Update the authenticated user")
async def update_current_user(
    payload: UserUpdate,
    session: DatabaseSessionDependency,
    current_user: SelfEditor,
) -> UserPublic:
    user = await UserService(session).update_user(
        current_user,
        name=payload.name,
        email=payload.email,
    )
    return _map_user(user)


@router.put(
    "/me/password",
    response_model=UserPublic,
    summary="Change the authenticated user's password (basic auth)",
)
async def change_current_password(
    payload: PasswordChange,
    session: DatabaseSessionDependency,
    current_user: OwnPasswordHolder,
) -> UserPublic:
    user = await UserService(session).change_password(current_user, payload.password)
    return _map_user(user)


@router.get("/{user_id}", response_model=UserPublic, summary="Retrieve a user by id")
async def read_user(user_id: str, session: DatabaseSessionDependency) -> UserPublic:
    user = await UserService(session).require_user(user_id)
    return _map_user(user)


@router.post(
    "",
    response_model=UserPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def create_user(payload: UserCreate, session: DatabaseSessionDependency) -> UserPublic:
    user = await UserService(session).create_user(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )
    return _map_user(user)


@router.put("/{user_id}", response_model=UserPublic, summary="Update a user (self or admin)")
async def update_user(
    user_id: str,
    payload: UserUpdate,
    session: DatabaseSessionDependency,
    requester: ProfileEditor,
) -> UserPublic:
    service = UserService(session)
    target = await service.require_user(user_id)
    ensure_may_act_on(UserAction.UPDATE, requester, target)
    user = await service.update_user(target, name=payload.name, email=payload.email)
    return _map_user(user)


@router.put(
    "/{user_id}/password",
    response_model=UserPublic,
    summary="Change a user's own password by id (basic auth)",
)
async def change_password(
    user_id: str,
    payload: PasswordChange,
    session: DatabaseSessionDependency,
    requester: PasswordHolder,
) -> UserPublic:
    service = UserService(session)
    target = await service.require_user(user_id)
    ensure_may_act_on(UserAction.CHANGE_PASSWORD, requester, target)
    user = await service.change_password(target, payload.password)
    return _map_user(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a user (admin only)",
)
async def delete_user(
    user_id: str,
    session: DatabaseSessionDependency,
    _: AccountRemover,
) -> Response:
    service = UserService(session)
    target = await service.require_user(user_id)
    await service.delete_user(target)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
