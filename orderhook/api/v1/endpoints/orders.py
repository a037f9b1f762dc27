"""Order endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from orderhook.api.deps import get_unit_of_work
from orderhook.core.exceptions import OrderLookupFailure, TransitionConflict
from orderhook.core.security import verify_api_key
from orderhook.repositories.unit_of_work import SqlUnitOfWork
from orderhook.schemas.order import OrderResponse, OrderStatusUpdate
from orderhook.services.order_service import OrderService

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    uow: SqlUnitOfWork = Depends(get_unit_of_work),
) -> OrderResponse:
    async with uow:
        order = await uow.orders.find_by_order_id(order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Order not found: {order_id}",
            )
        return OrderResponse.model_validate(order)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    request: OrderStatusUpdate,
    uow: SqlUnitOfWork = Depends(get_unit_of_work),
) -> OrderResponse:
    """Advance an order along its lifecycle (paid -> processing -> completed)."""
    async with uow:
        try:
            order = await OrderService(uow.orders, uow.payment_sessions).advance(
                order_id, request.status
            )
        except (OrderLookupFailure, TransitionConflict) as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)
        await uow.commit()
        return OrderResponse.model_validate(order)
