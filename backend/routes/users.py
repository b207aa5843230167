from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

import auth
import crud
from database import get_db
from errors import ErrorResponse, UnauthorizedError
from models import User
from schemas import LoginRequest, MessageResponse, TokenResponse, UserCreate, UserOut
from utils.security import TokenIdentity

UNAUTHORIZED_RESPONSE = {401: {"model": ErrorResponse, "description": "Missing, invalid or expired token."}}

router = APIRouter(tags=["Users"])


@router.post("/users", response_model=UserOut, summary="Create a user account")
def create_user(request: UserCreate, db: Session = Depends(get_db)):
    return crud.create_user(db, request.username, request.email, request.password)


@router.get("/users/me", response_model=UserOut, summary="Current user",
            responses=UNAUTHORIZED_RESPONSE)
def read_current_user(identity: TokenIdentity = Depends(auth.verify_token),
                      db: Session = Depends(get_db)):
    user = crud.get_record(db, User, identity.user_id)
    if user is None:
        # Token outlived its account
        raise UnauthorizedError("Invalid token")
    return user


@router.post("/login", response_model=TokenResponse, summary="Issue a session token",
             responses={401: {"model": ErrorResponse, "description": "Invalid credentials."}})
def login_user(request: LoginRequest, db: Session = Depends(get_db)):
    """`username` may be either the account's username or its email."""
    return auth.login(db, request)


@router.get("/logout", response_model=MessageResponse, summary="Log out")
def logout_user(request: Request):
    """
    Acknowledge a logout.

    A still-valid bearer token is revoked for the rest of its lifetime.
    Expired, revoked or malformed tokens are ignored. Revocations are held
    in memory and do not survive a restart.
    """
    auth.logout(request)
    return {"message": "Logged out"}
