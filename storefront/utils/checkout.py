"""Checkout: turn the active cart into an order."""
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
from sqlalchemy.orm import Session, joinedload
from storefront.config import settings
from storefront.database.checkout_schema import AddressInput, CheckoutRequest, OrderTotals
from storefront.database.order_models import Address, Order, OrderItem
from storefront.utils.reconciliation import StorefrontSession

CENT = Decimal("0.01")


class CheckoutError(Exception):
    """Raised when an order cannot be placed."""
    pass


def calculate_order_totals(subtotal: Decimal) -> OrderTotals:
    """
    Calculate shipping, tax and grand total for a cart subtotal.
    
    Shipping is free above the free-shipping threshold and a flat rate
    otherwise. Tax is a fixed rate on the subtotal.
    
    Args:
        subtotal: Sum of line item subtotals
        
    Returns:
        Order totals rounded to cents
    """
    subtotal = Decimal(subtotal)
    if subtotal > Decimal(str(settings.free_shipping_threshold)):
        shipping = Decimal("0")
    else:
        shipping = Decimal(str(settings.shipping_flat_rate))
    tax = (subtotal * Decimal(str(settings.tax_rate))).quantize(CENT, rounding=ROUND_HALF_UP)
    total = subtotal + shipping + tax
    
    return OrderTotals(
        subtotal=float(subtotal),
        shipping_amount=float(shipping),
        tax_amount=float(tax),
        total_amount=float(total)
    )


def _save_address(db: Session, user_id: str, address_type: str, address: AddressInput) -> Address:
    record = Address(
        user_id=user_id,
        address_type=address_type,
        address_line1=address.address_line1,
        address_line2=address.address_line2 or None,
        city=address.city,
        state=address.state,
        postal_code=address.postal_code,
        is_default=True
    )
    db.add(record)
    db.flush()
    return record


def place_order(
    db: Session,
    session: StorefrontSession,
    checkout: CheckoutRequest,
    session_id: str
) -> Order:
    """
    Create an order from the session's cart and clear the cart.
    
    Payment is simulated: cash-on-delivery orders stay pending, every other
    method is recorded as paid.
    
    Args:
        db: Database session
        session: Shopper session holding the cart
        checkout: Checkout form submission
        session_id: Browser session identifier
        
    Returns:
        The persisted order with its items loaded
        
    Raises:
        CheckoutError: If the cart is empty
    """
    cart = session.cart
    if cart.is_empty:
        session.notifier.error("Your cart is empty")
        raise CheckoutError("Your cart is empty")
    
    user_id = session.identity_service.current_user_id
    totals = calculate_order_totals(cart.subtotal)
    
    try:
        shipping_address_id = None
        billing_address_id = None
        
        # Only signed-in shoppers have an address book
        if user_id and checkout.save_address_for_later:
            shipping_address_id = _save_address(db, user_id, "shipping", checkout.shipping_address).id
            if checkout.same_as_shipping:
                billing_address_id = shipping_address_id
            else:
                billing_address_id = _save_address(db, user_id, "billing", checkout.billing_address).id
        
        order = Order(
            user_id=user_id,
            session_id=session_id,
            order_status="pending",
            payment_status="pending" if checkout.payment_method == "cod" else "paid",
            payment_method=checkout.payment_method,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            shipping_amount=totals.shipping_amount,
            total_amount=totals.total_amount,
            shipping_address_id=shipping_address_id,
            billing_address_id=billing_address_id,
            transaction_id=f"TXN{int(time.time() * 1000)}",
            notes="Order placed through website checkout"
        )
        db.add(order)
        db.flush()  # Get order ID
        
        for line_item in cart.items:
            db.add(OrderItem(
                order_id=order.id,
                product_id=str(line_item.id),
                product_name=line_item.name,
                quantity=line_item.quantity,
                unit_price=line_item.unit_price,
                subtotal=line_item.subtotal
            ))
        
        db.commit()
    except Exception:
        db.rollback()
        session.notifier.error("Failed to process your order. Please try again.")
        raise
    
    print(f"[CHECKOUT] Order {order.id} placed: {len(cart.items)} line item(s), total {totals.total_amount:.2f}")
    
    cart.clear_cart()
    session.notifier.success("Order placed successfully!")
    
    return db.query(Order).options(joinedload(Order.items)).filter(Order.id == order.id).first()


def get_orders(
    db: Session,
    user_id: Optional[str] = None,
    session_id: Optional[str] = None,
    limit: Optional[int] = None
) -> List[Order]:
    """
    Get order history, newest first.
    
    Args:
        db: Database session
        user_id: Signed-in user whose orders to return
        session_id: Guest session whose orders to return when no user is given
        limit: Maximum number of orders to return (all when None)
        
    Returns:
        List of orders with items loaded
    """
    query = _owned_orders(db, user_id, session_id).order_by(Order.created_at.desc(), Order.id.desc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_order(
    db: Session,
    order_id: int,
    user_id: Optional[str] = None,
    session_id: Optional[str] = None
) -> Optional[Order]:
    """
    Get one order with its items, if it belongs to the given shopper.
    
    Args:
        db: Database session
        order_id: Order ID
        user_id: Signed-in user who must own the order
        session_id: Guest session that must own the order when no user is given
        
    Returns:
        The order, or None when it does not exist or belongs to someone else
    """
    return _owned_orders(db, user_id, session_id).filter(Order.id == order_id).first()


def _owned_orders(db: Session, user_id: Optional[str], session_id: Optional[str]):
    query = db.query(Order).options(joinedload(Order.items))
    if user_id:
        return query.filter(Order.user_id == user_id)
    return query.filter(Order.user_id.is_(None), Order.session_id == session_id)
