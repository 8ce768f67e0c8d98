# ecomerce/cart.py
from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from . import cart_service, links
from .database import get_session
from .exceptions import CartItemNotFound, CartNotFound
from .schemas import CartItemOut, CartItemRequest, CartOut

router = APIRouter(prefix="/api/carritos", tags=["carritos"])


@router.get("/{user_id}", response_model=CartOut)
async def get_cart(user_id: int, request: Request, session: AsyncSession = Depends(get_session)):
    cart = await cart_service.get_or_create_cart(session, user_id)
    return links.cart_out(request, cart)


@router.post("/{user_id}/items", response_model=CartItemOut)
async def add_cart_item(
    user_id: int,
    payload: CartItemRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    item = await cart_service.add_item(session, user_id, payload.product_id, payload.quantity)
    return links.cart_item_out(request, user_id, item)


@router.put(
    "/{user_id}/items/{product_id}",
    response_model=CartItemOut,
    responses={204: {"description": "Quantity set to 0, item removed"}},
)
async def update_cart_item(
    user_id: int,
    product_id: int,
    request: Request,
    nueva_cantidad: int = Query(..., alias="nuevaCantidad"),
    session: AsyncSession = Depends(get_session),
):
    item = await cart_service.update_quantity(session, user_id, product_id, nueva_cantidad)
    if item is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return links.cart_item_out(request, user_id, item)


@router.delete("/{user_id}/items/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_cart_item(user_id: int, product_id: int, session: AsyncSession = Depends(get_session)):
    removed = await cart_service.remove_item(session, user_id, product_id)
    if not removed:
        raise CartItemNotFound(user_id, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}/vaciar", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cart(user_id: int, session: AsyncSession = Depends(get_session)):
    cleared = await cart_service.clear_cart(session, user_id)
    if not cleared:
        raise CartNotFound(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
