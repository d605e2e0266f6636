# app/api/v1/routes/orders.py
"""
Order placement, table bill, payment and receipt endpoints.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.envelope import ok
from app.api.v1.schemas.billing import OrderCreate
from app.core.db import get_db
from app.domain.models.billing import InvalidInput
from app.domain.services import order_service
from app.domain.services.coupon_service import CouponError
from app.domain.services.order_service import OrderAlreadyPaid, OrderNotFound

logger = logging.getLogger("api.v1.orders")

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderCreate,
    db: AsyncSession = Depends(get_db),
):
    """Place an order for a table. A coupon, if given, must be valid."""
    try:
        placed = await order_service.place_order(
            [i.to_payload() for i in body.items],
            body.table_number,
            db,
            customer_phone=body.customer_phone,
            customer_name=body.customer_name,
            coupon_code=body.coupon_code,
        )
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except CouponError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.reason)

    return ok(
        data={
            "orderId": str(placed.order_id),
            "bill": placed.bill.to_dict(),
            "settingsSource": placed.settings_source,
        },
        message="Order placed",
    )


@router.get("/table/{table_number}/bill", response_model=dict)
async def get_table_bill(
    table_number: int,
    db: AsyncSession = Depends(get_db),
):
    """Unpaid orders for a table with a detailed bill each."""
    try:
        data = await order_service.table_bill(table_number, db)
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return ok(data=data)


@router.post("/{order_id}/pay", response_model=dict)
async def pay_order(
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Settle an order at its freshly computed bill."""
    try:
        bill = await order_service.pay_bill(order_id, db)
    except OrderNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    except OrderAlreadyPaid:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Order is already paid")
    except InvalidInput as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return ok(data=bill.to_dict(), message=f"Bill paid successfully. Order #{str(order_id)[:8]}")


@router.get("/{order_id}/receipt", response_model=dict)
async def get_receipt(
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    try:
        receipt = await order_service.order_receipt(order_id, db)
    except OrderNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return ok(data=receipt)
