import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException

from secure_labs.types import LabUser, Order
from secure_labs.web.dependencies import Dependencies, get_deps

logger = logging.getLogger(__name__)


def parse_user_id(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def get_current_user(
    deps: Annotated[Dependencies, Depends(get_deps)], x_user_id: Annotated[str | None, Header()] = None
) -> LabUser:
    """Identify the caller from the X-User-Id header."""
    user_id = parse_user_id(x_user_id)
    user = deps.order_store.get_user(user_id) if user_id is not None else None
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthenticated: set X-User-Id")
    return user


CurrentUser = Annotated[LabUser, Depends(get_current_user)]

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/")
async def root(user: CurrentUser):
    return {"message": "Access Control API", "current_user": user}


@router.get("/orders/{order_id}", response_model=Order)
async def get_order(order_id: int, user: CurrentUser, deps: Annotated[Dependencies, Depends(get_deps)]):
    """Return an order, but only to the user who placed it."""
    order = deps.order_store.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    if order.user_id != user.id:
        logger.warning(f"User {user.id} denied access to order {order_id}")
        raise HTTPException(status_code=403, detail="Forbidden: Access denied")

    return order
