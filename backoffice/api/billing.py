from typing import Optional
from fastapi import APIRouter, Depends, Request, status

from backoffice.auth.auth import get_current_hotel, get_current_user
from backoffice.db.gateway import PersistenceGateway, get_gateway
from backoffice.models.models import Hotel, User
from backoffice.schemas.schemas import (
    BillCreate, BillDetail, BillingSummary, BillList, BillSubmissionResponse,
    CartItemAdd, CartQuantityUpdate, CartRead, CheckoutRequest
)
from backoffice.services.billing_service import BillComposer, BillingService, CartRegistry
from backoffice.services.summary_service import SummaryService
from loguru import logger

router = APIRouter(prefix="/billing", tags=["billing"])

def get_cart_registry(request: Request) -> CartRegistry:
    return request.app.state.carts

def get_cart(
    current_user: User = Depends(get_current_user),
    carts: CartRegistry = Depends(get_cart_registry)
) -> BillComposer:
    return carts.get(current_user.id)

def submission_response(submission) -> dict:
    message = "Bill created" if submission.items_recorded else "Bill created; line items could not be recorded"
    return {"message": message, "bill": submission.bill, "items_recorded": submission.items_recorded}

# Cart

@router.get("/cart", response_model=CartRead)
async def get_cart_contents(
    hotel: Hotel = Depends(get_current_hotel),
    cart: BillComposer = Depends(get_cart)
):
    """Current cart with derived totals"""
    return cart.to_schema()

@router.delete("/cart", response_model=CartRead)
async def clear_cart(
    hotel: Hotel = Depends(get_current_hotel),
    cart: BillComposer = Depends(get_cart)
):
    cart.clear()
    return cart.to_schema()

@router.post("/cart/items", response_model=CartRead, status_code=status.HTTP_201_CREATED)
async def add_cart_item(
    item: CartItemAdd,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel),
    cart: BillComposer = Depends(get_cart)
):
    """Add a room, food or service selection to the cart"""
    await BillingService(gateway, hotel.id).add_to_cart(cart, item)
    return cart.to_schema()

@router.patch("/cart/items/{line_id}", response_model=CartRead)
async def update_cart_item(
    line_id: str,
    update: CartQuantityUpdate,
    hotel: Hotel = Depends(get_current_hotel),
    cart: BillComposer = Depends(get_cart)
):
    """Change a line's quantity; quantities below 1 and unknown lines are ignored"""
    cart.update_quantity(line_id, update.quantity)
    return cart.to_schema()

@router.delete("/cart/items/{line_id}", response_model=CartRead)
async def remove_cart_item(
    line_id: str,
    hotel: Hotel = Depends(get_current_hotel),
    cart: BillComposer = Depends(get_cart)
):
    cart.remove_item(line_id)
    return cart.to_schema()

@router.post("/cart/checkout", response_model=BillSubmissionResponse, status_code=status.HTTP_201_CREATED)
async def checkout(
    request: CheckoutRequest,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel),
    cart: BillComposer = Depends(get_cart)
):
    """Persist the cart as a bill, then empty the cart"""
    submission = await BillingService(gateway, hotel.id).submit(
        request.customer_name, request.customer_phone, cart.lines
    )
    cart.clear()
    return submission_response(submission)

# Bills

@router.post("/bills", response_model=BillSubmissionResponse, status_code=status.HTTP_201_CREATED)
async def create_bill(
    bill: BillCreate,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Create a bill from explicit selections, bypassing the stored cart"""
    submission = await BillingService(gateway, hotel.id).compose_and_submit(
        bill.customer_name, bill.customer_phone, bill.items
    )
    return submission_response(submission)

@router.get("/bills", response_model=BillList)
async def get_bills(
    search: Optional[str] = None,
    payment_status: Optional[str] = None,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Billing history, newest first"""
    bills = await BillingService(gateway, hotel.id).get_bills(search, payment_status)
    return {"bills": bills, "total": len(bills)}

@router.get("/bills/{bill_id}", response_model=BillDetail)
async def get_bill(
    bill_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """A bill with its recorded line items and the hotel header, for the receipt view"""
    billing_service = BillingService(gateway, hotel.id)
    bill = await billing_service.get_bill(bill_id)
    line_items = await billing_service.get_bill_items(bill.id)
    return {**bill.dict(), "line_items": line_items, "hotel": hotel.dict()}

@router.delete("/bills/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bill(
    bill_id: int,
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    await BillingService(gateway, hotel.id).delete_bill(bill_id)

@router.get("/summary", response_model=BillingSummary)
async def get_billing_summary(
    gateway: PersistenceGateway = Depends(get_gateway),
    hotel: Hotel = Depends(get_current_hotel)
):
    """Revenue totals, growth and category breakdown"""
    logger.debug(f"Building billing summary for hotel {hotel.id}")
    return await SummaryService(gateway, hotel.id).get_billing_summary()
