# ecomerce/users.py
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from . import crud, links
from .database import get_session
from .exceptions import UserNotFound
from .schemas import UserCollection, UserCreate, UserOut

router = APIRouter(prefix="/api/usuarios", tags=["usuarios"])


@router.get("", response_model=UserCollection)
async def list_users(request: Request, session: AsyncSession = Depends(get_session)):
    users = await crud.list_users(session)
    return links.user_collection(request, users)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    user = await crud.create_user(session, payload)
    out = links.user_out(request, user)
    response.headers["Location"] = out.links["self"]
    return out


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: int, request: Request, session: AsyncSession = Depends(get_session)):
    user = await crud.get_user(session, user_id)
    if user is None:
        raise UserNotFound(user_id)
    return links.user_out(request, user)


@router.put("/{user_id}", response_model=UserOut)
async def replace_user(
    user_id: int,
    payload: UserCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    user = await crud.replace_user(session, user_id, payload)
    return links.user_out(request, user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, session: AsyncSession = Depends(get_session)):
    await crud.delete_user(session, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
