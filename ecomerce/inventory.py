# ecomerce/inventory.py
from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from . import crud, ledger, links
from .database import get_session
from .exceptions import ProductNotFound
from .schemas import ProductCollection, ProductCreate, ProductOut

router = APIRouter(prefix="/api/inventario", tags=["inventario"])


@router.get("", response_model=ProductCollection)
async def list_products(request: Request, session: AsyncSession = Depends(get_session)):
    products = await crud.list_products(session)
    return links.product_collection(request, products)


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    product = await crud.create_product(session, payload)
    out = links.product_out(request, product)
    response.headers["Location"] = out.links["self"]
    return out


@router.get("/{product_id}", response_model=ProductOut)
async def get_product(product_id: int, request: Request, session: AsyncSession = Depends(get_session)):
    product = await crud.get_product(session, product_id)
    if product is None:
        raise ProductNotFound(product_id)
    return links.product_out(request, product)


@router.put("/{product_id}", response_model=ProductOut)
async def replace_product(
    product_id: int,
    payload: ProductCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    product = await crud.replace_product(session, product_id, payload)
    return links.product_out(request, product)


@router.put("/{product_id}/stock", response_model=ProductOut)
async def adjust_product_stock(
    product_id: int,
    request: Request,
    cantidad: int = Query(..., description="Units to add (positive) or remove (negative)"),
    session: AsyncSession = Depends(get_session),
):
    product = await ledger.adjust_stock(session, product_id, cantidad)
    return links.product_out(request, product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: int, session: AsyncSession = Depends(get_session)):
    await crud.delete_product(session, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
