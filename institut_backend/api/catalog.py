"""Catalogue endpoints: catégories, produits, catalogue du site et codes."""

from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_resource
from institut_backend.schemas.catalog import (
    CategoryCreate,
    CategoryOut,
    CategoryPage,
    CategoryUpdate,
    CodeSuggestion,
    ProductCreate,
    ProductOut,
    ProductPage,
    ProductUpdate,
    StockIncrease,
    WebsiteProduct,
)
from institut_backend.schemas.common import DeleteResult
from institut_backend.services import catalog as catalog_service
from institut_core.code_generators import generate_barcode

router = APIRouter(prefix="/catalog", tags=["catalog"])

# Le catalogue du site est public : pas de dépendance d'authentification.
website_router = APIRouter(prefix="/catalog/website", tags=["website"])

_access = require_resource("products")


# -- categories ------------------------------------------------------------


@router.get("/categories", response_model=CategoryPage)
def list_categories(
    type: Optional[Literal["product", "service"]] = Query(default=None),
    is_active: Optional[bool] = Query(default=None),
    search: Optional[str] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = catalog_service.list_categories_page(
        category_type=type,
        is_active=is_active,
        search=search,
        page=paging.page,
        per_page=paging.per_page,
    )
    return CategoryPage(items=result.items, meta=result.meta())


@router.post("/categories", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryCreate, user: AuthenticatedUser = Depends(_access)):
    return catalog_service.create_category(payload.model_dump(), created_by=user.id)


@router.put("/categories/{category_id}", response_model=CategoryOut)
def update_category(category_id: str, payload: CategoryUpdate, user: AuthenticatedUser = Depends(_access)):
    return catalog_service.update_category(category_id, payload.model_dump(exclude_unset=True))


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    catalog_service.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -- products --------------------------------------------------------------


@router.get("/products", response_model=ProductPage)
def list_products(
    search: Optional[str] = Query(default=None, description="Nom, marque, SKU ou code-barres"),
    category_id: Optional[str] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    is_active: Optional[bool] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = catalog_service.list_products_page(
        search=search,
        category_id=category_id,
        status=status_filter,
        is_active=is_active,
        page=paging.page,
        per_page=paging.per_page,
    )
    return ProductPage(items=result.items, meta=result.meta())


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: str, user: AuthenticatedUser = Depends(_access)):
    try:
        return catalog_service.get_product(product_id)
    except catalog_service.ProductNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.post("/products", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, user: AuthenticatedUser = Depends(_access)):
    return catalog_service.create_product(payload.model_dump(), created_by=user.id)


@router.put("/products/{product_id}", response_model=ProductOut)
def update_product(product_id: str, payload: ProductUpdate, user: AuthenticatedUser = Depends(_access)):
    try:
        return catalog_service.update_product(product_id, payload.model_dump(exclude_unset=True))
    except catalog_service.ProductNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/products/{product_id}", response_model=DeleteResult)
def delete_product(product_id: str, user: AuthenticatedUser = Depends(_access)) -> DeleteResult:
    try:
        archived = catalog_service.delete_product(product_id)
    except catalog_service.ProductNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    if archived:
        return DeleteResult(
            deleted=False,
            soft_deleted=True,
            message="Produit référencé par des ventes ou des stocks : archivé.",
        )
    return DeleteResult(deleted=True)


@router.post("/products/{product_id}/stock", response_model=ProductOut)
def increase_product_stock(
    product_id: str,
    payload: StockIncrease,
    user: AuthenticatedUser = Depends(_access),
):
    try:
        return catalog_service.increase_stock(product_id, payload.quantity)
    except catalog_service.ProductNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


# -- codes -----------------------------------------------------------------


@router.get("/codes/sku", response_model=CodeSuggestion)
def suggest_sku(
    name: str = Query(..., min_length=1),
    category: Optional[str] = Query(default=None),
    user: AuthenticatedUser = Depends(_access),
):
    return CodeSuggestion(code=catalog_service.suggest_sku(category, name))


@router.get("/codes/barcode", response_model=CodeSuggestion)
def suggest_barcode(user: AuthenticatedUser = Depends(_access)):
    return CodeSuggestion(code=generate_barcode())


# -- site web --------------------------------------------------------------


@website_router.get("/products", response_model=List[WebsiteProduct])
def list_website_products(category_id: Optional[str] = Query(default=None)):
    return catalog_service.list_website_products(category_id=category_id)


@website_router.get("/products/{product_id}", response_model=WebsiteProduct)
def get_website_product(product_id: str):
    try:
        return catalog_service.get_website_product(product_id)
    except catalog_service.ProductNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
