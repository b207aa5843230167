from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import crud
from auth import optional_identity
from database import get_db
from errors import ErrorResponse, NotFoundError
from models import Customer
from ratelimit import RateLimit
from schemas import CustomerCreate, CustomerOut, CustomerUpdate
from utils.security import TokenIdentity

SEARCH_FIELDS = ("first_name", "last_name", "email")
NOT_FOUND = "Customer not found!"

# Shared documentation for the error bodies these routes can return
NOT_FOUND_RESPONSE = {404: {"model": ErrorResponse, "description": "Customer not found."}}
COMMON_RESPONSES = {
    429: {"model": ErrorResponse, "description": "Too many requests from this client."},
    500: {"model": ErrorResponse, "description": "Internal server error."},
}

router = APIRouter(
    prefix="/customers",
    tags=["Customers"],
    dependencies=[Depends(RateLimit("customers"))],
    responses=COMMON_RESPONSES,
)


@router.post("", response_model=CustomerOut, summary="Create a new Customer")
def create_customer(request: CustomerCreate, db: Session = Depends(get_db)):
    """Create a new customer in the database; the identifier is assigned by the store."""
    return crud.create_record(db, Customer, request.model_dump())


@router.put("", response_model=CustomerOut, summary="Update Customer", responses=NOT_FOUND_RESPONSE)
def update_customer(request: CustomerUpdate, db: Session = Depends(get_db)):
    """Replace every field of the customer identified by `customer_id`."""
    data = request.model_dump(exclude={"customer_id"})
    return crud.update_record(db, Customer, request.customer_id, data, NOT_FOUND)


@router.delete("/{id}", response_model=CustomerOut, summary="Delete Customer by ID",
               responses=NOT_FOUND_RESPONSE)
def delete_customer(id: int, db: Session = Depends(get_db)):
    """Delete a single customer and return the removed record."""
    return crud.delete_record(db, Customer, id, NOT_FOUND)


@router.get("/q/{term}", response_model=List[CustomerOut], summary="Search Customers by Term",
            responses={404: {"model": ErrorResponse, "description": "No customer matches the term."}})
def search_customers(term: str, db: Session = Depends(get_db)):
    """Customers whose first name, last name or email contains the term."""
    customers = crud.search_records(db, Customer, SEARCH_FIELDS, term)
    if not customers:
        raise NotFoundError("customer not found!")
    return customers


@router.get("/{id}", response_model=CustomerOut, summary="Get Customer by ID",
            responses=NOT_FOUND_RESPONSE)
def get_customer(id: int, db: Session = Depends(get_db)):
    customer = crud.get_record(db, Customer, id)
    if customer is None:
        raise NotFoundError(NOT_FOUND)
    return customer


@router.get("", response_model=List[CustomerOut], summary="Get All Customers",
            responses={401: {"model": ErrorResponse, "description": "A bearer token was sent but is not valid."}})
def list_customers(db: Session = Depends(get_db),
                   identity: Optional[TokenIdentity] = Depends(optional_identity)):
    """
    Every customer in the database.

    A bearer token is optional here; when one is sent it must be valid.
    """
    return crud.list_records(db, Customer)
