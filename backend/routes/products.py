from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import crud
from database import get_db
from errors import ErrorResponse, NotFoundError
from models import Product
from ratelimit import RateLimit
from schemas import ProductCreate, ProductOut, ProductUpdate

SEARCH_FIELDS = ("description", "name", "category")
NOT_FOUND = "Product not found!"

NOT_FOUND_RESPONSE = {404: {"model": ErrorResponse, "description": "Product not found."}}

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    dependencies=[Depends(RateLimit("products"))],
    responses={
        429: {"model": ErrorResponse, "description": "Too many requests from this client."},
        500: {"model": ErrorResponse, "description": "Internal server error."},
    },
)


@router.post("", response_model=ProductOut, summary="Create a new Product")
def create_product(request: ProductCreate, db: Session = Depends(get_db)):
    return crud.create_record(db, Product, request.model_dump())


@router.put("", response_model=ProductOut, summary="Update a Product", responses=NOT_FOUND_RESPONSE)
def update_product(request: ProductUpdate, db: Session = Depends(get_db)):
    data = request.model_dump(exclude={"product_id"})
    return crud.update_record(db, Product, request.product_id, data, NOT_FOUND)


@router.delete("/{id}", response_model=ProductOut, summary="Delete Product by ID",
               responses=NOT_FOUND_RESPONSE)
def delete_product(id: int, db: Session = Depends(get_db)):
    return crud.delete_record(db, Product, id, NOT_FOUND)


@router.get("/q/{term}", response_model=List[ProductOut], summary="Search Products by Term",
            responses={404: {"model": ErrorResponse, "description": "No product matches the term."}})
def search_products(term: str, db: Session = Depends(get_db)):
    """Products whose name, description or category contains the term."""
    products = crud.search_records(db, Product, SEARCH_FIELDS, term)
    if not products:
        raise NotFoundError("product not found!")
    return products


@router.get("/{id}", response_model=ProductOut, summary="Get Product by ID",
            responses=NOT_FOUND_RESPONSE)
def get_product(id: int, db: Session = Depends(get_db)):
    product = crud.get_record(db, Product, id)
    if product is None:
        raise NotFoundError(NOT_FOUND)
    return product


@router.get("", response_model=List[ProductOut], summary="Get All Products")
def list_products(db: Session = Depends(get_db)):
    return crud.list_records(db, Product)
