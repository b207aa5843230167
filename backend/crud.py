from typing import Iterable, Optional, Type

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import Base
from errors import NotFoundError, StoreError
from logging_config import get_logger
from models import User
from utils.security import generate_salt, hash_password

logger = get_logger("storefront.crud")


def _store_failure(db: Session, operation: str, model: Type[Base], exc: SQLAlchemyError) -> StoreError:
    db.rollback()
    logger.error(
        "Store operation failed",
        operation=operation,
        table=model.__tablename__,
        error=str(exc),
        exc_info=exc,
    )
    return StoreError()


def _primary_key(model: Type[Base]):
    return model.__mapper__.primary_key[0]


def create_record(db: Session, model: Type[Base], data: dict):
    record = model(**data)
    try:
        db.add(record)
        db.commit()
        db.refresh(record)
    except SQLAlchemyError as exc:
        raise _store_failure(db, "create", model, exc) from exc
    return record


def get_record(db: Session, model: Type[Base], record_id: int):
    try:
        return db.get(model, record_id)
    except SQLAlchemyError as exc:
        raise _store_failure(db, "get", model, exc) from exc


def list_records(db: Session, model: Type[Base]) -> list:
    try:
        return list(db.scalars(select(model).order_by(_primary_key(model))))
    except SQLAlchemyError as exc:
        raise _store_failure(db, "list", model, exc) from exc


# Full replace of every non-key column; the identifier itself never changes
def update_record(db: Session, model: Type[Base], record_id: int, data: dict, not_found: str):
    record = get_record(db, model, record_id)
    if record is None:
        raise NotFoundError(not_found)
    key_name = _primary_key(model).name
    for column in model.__table__.columns:
        if column.name == key_name:
            continue
        setattr(record, column.name, data.get(column.name))
    try:
        db.commit()
        db.refresh(record)
    except SQLAlchemyError as exc:
        raise _store_failure(db, "update", model, exc) from exc
    return record


def delete_record(db: Session, model: Type[Base], record_id: int, not_found: str):
    record = get_record(db, model, record_id)
    if record is None:
        raise NotFoundError(not_found)
    try:
        db.delete(record)
        db.commit()
    except SQLAlchemyError as exc:
        raise _store_failure(db, "delete", model, exc) from exc
    return record


# Substring match over the given text columns, % and _ in the term are literal
def search_records(db: Session, model: Type[Base], fields: Iterable[str], term: str) -> list:
    clauses = [getattr(model, name).contains(term, autoescape=True) for name in fields]
    statement = select(model).where(or_(*clauses)).order_by(_primary_key(model))
    try:
        return list(db.scalars(statement))
    except SQLAlchemyError as exc:
        raise _store_failure(db, "search", model, exc) from exc


def create_user(db: Session, username: str, email: str, password: str) -> User:
    salt = generate_salt()
    hashed_pw = hash_password(password, salt)
    return create_record(
        db, User,
        {"username": username, "email": email, "password_hash": hashed_pw, "salt": salt},
    )


# Login identifier may be either the username or the account email
def get_user_by_login(db: Session, login: str) -> Optional[User]:
    statement = select(User).where(or_(User.username == login, User.email == login))
    try:
        return db.scalars(statement).first()
    except SQLAlchemyError as exc:
        raise _store_failure(db, "get", User, exc) from exc
