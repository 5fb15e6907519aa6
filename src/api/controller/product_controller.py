"""REST controller for the /products resource."""

from dataclasses import asdict
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, Request, Response, status
from pydantic import BaseModel, Field, StrictFloat, StrictInt, field_validator

from src.services import ProductService

router = APIRouter(prefix="/products", tags=["products"])


class ProductCreate(BaseModel):
    """Incoming body for POST /products."""

    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: Optional[Union[StrictInt, StrictFloat]] = None


class ProductUpdate(BaseModel):
    """Incoming body for PUT /products/{id}. Only fields present are applied."""

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[Union[StrictInt, StrictFloat]] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("name cannot be null")
        return value


class ProductResponse(BaseModel):
    """Outgoing product representation."""

    id: str
    name: str
    description: Optional[str] = None
    price: Optional[float] = None


def get_product_service(request: Request) -> ProductService:
    """Resolve the product service attached to the application."""
    return request.app.state.product_service


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProductResponse)
async def create_product(
    body: ProductCreate,
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    product = await service.create_product(body.model_dump())
    return ProductResponse(**asdict(product))


@router.get("", response_model=list[ProductResponse])
async def list_products(
    search: Optional[str] = Query(default=None, description="Case-insensitive substring of the name"),
    service: ProductService = Depends(get_product_service),
) -> list[ProductResponse]:
    products = await service.list_products(search)
    return [ProductResponse(**asdict(product)) for product in products]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    product = await service.get_product(product_id)
    return ProductResponse(**asdict(product))


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    body: ProductUpdate,
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    product = await service.update_product(product_id, body.model_dump(exclude_unset=True))
    return ProductResponse(**asdict(product))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> Response:
    await service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
