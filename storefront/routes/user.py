"""User routes for session, cart, wishlist, checkout and catalog browsing."""
import hashlib
from fastapi import APIRouter, HTTPException, Request, Depends, status, Query
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Optional, List, Dict, Any, Literal
from pydantic import BaseModel, Field
from storefront.database.connection import get_db
from storefront.database.product_model import Product
from storefront.database.product_schema import ProductResponse
from storefront.database.collection_schema import ProductRef, ProductSnapshot
from storefront.database.checkout_schema import CheckoutRequest, OrderResponse, OrderTotals
from storefront.config import settings
from storefront.database.profile_schema import ProfileOverviewResponse, ProfileResponse, ProfileUpdate
from storefront.utils.checkout import CheckoutError, calculate_order_totals, get_order, get_orders, place_order
from storefront.utils.profiles import get_profile, update_profile
from storefront.utils.reconciliation import StorefrontSession
from storefront.utils.sessions import session_registry

router = APIRouter(prefix="/user", tags=["user"])


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.
    Handles proxies and forwarded headers.
    
    Args:
        request: FastAPI request object
        
    Returns:
        Client IP address as string
    """
    # X-Forwarded-For can contain multiple IPs, the first one is the client
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    
    if request.client:
        return request.client.host
    
    return "unknown"


def generate_session_id(ip_address: str) -> str:
    """
    Generate a consistent session_id from IP address.
    
    Args:
        ip_address: Client IP address
        
    Returns:
        Session ID based on IP address
    """
    hash_obj = hashlib.md5(ip_address.encode())
    return f"session_{hash_obj.hexdigest()[:16]}"


def get_session_id(request: Request) -> str:
    """Dependency resolving the browser session id of a request."""
    return generate_session_id(get_client_ip(request))


def get_shopper(session_id: str = Depends(get_session_id)) -> StorefrontSession:
    """Dependency resolving the shopper session of a request."""
    shopper = session_registry.get(session_id)
    # Messages left over from a previous request are not repeated
    shopper.notifier.drain()
    return shopper


def parse_product_ref(value: str) -> ProductRef:
    """Catalog ids are numeric; anything else is an external reference."""
    return int(value) if value.isdigit() else value


def _load_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with ID {product_id} not found"
        )
    if not product.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Product '{product.name}' is not available for purchase"
        )
    return product


def _snapshot(product: Product) -> ProductSnapshot:
    return ProductSnapshot(
        id=product.id,
        name=product.name,
        unit_price=product.effective_price,
        image=product.image or ""
    )


# Session endpoints
class NotificationResponse(BaseModel):
    """User-facing message raised while handling the request."""
    message: str
    severity: str


class SignInRequest(BaseModel):
    """Request model for sign-in and sign-up."""
    user_id: str = Field(..., min_length=1, max_length=100, description="Account identifier")


class SessionResponse(BaseModel):
    """Current identity of the shopper."""
    session_id: str
    authenticated: bool
    user_id: Optional[str] = None


def _session_response(session_id: str, shopper: StorefrontSession) -> SessionResponse:
    user_id = shopper.identity_service.current_user_id
    return SessionResponse(session_id=session_id, authenticated=user_id is not None, user_id=user_id)


@router.get("/session", response_model=SessionResponse, summary="Get current identity")
def get_session(
    session_id: str = Depends(get_session_id),
    shopper: StorefrontSession = Depends(get_shopper)
):
    """Get the identity the shopper is currently browsing as."""
    return _session_response(session_id, shopper)


@router.post("/session/sign-in", response_model=SessionResponse, summary="Sign in")
def sign_in(
    request: SignInRequest,
    session_id: str = Depends(get_session_id),
    shopper: StorefrontSession = Depends(get_shopper)
):
    """
    Sign in and merge the guest cart and wishlist into the user's saved ones.
    """
    try:
        shopper.identity_service.sign_in(request.user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return _session_response(session_id, shopper)


@router.post(
    "/session/sign-up",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up"
)
def sign_up(
    request: SignInRequest,
    session_id: str = Depends(get_session_id),
    shopper: StorefrontSession = Depends(get_shopper)
):
    """Register a new account and sign it in."""
    try:
        shopper.identity_service.sign_up(request.user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return _session_response(session_id, shopper)


@router.post("/session/sign-out", response_model=SessionResponse, summary="Sign out")
def sign_out(
    session_id: str = Depends(get_session_id),
    shopper: StorefrontSession = Depends(get_shopper)
):
    """Sign out. The cart starts over empty; the user's saved cart is kept."""
    shopper.identity_service.sign_out()
    return _session_response(session_id, shopper)


# Cart endpoints
class CartItemRequest(BaseModel):
    """Request model for adding a product to the cart."""
    product_id: int = Field(..., description="Catalog product ID")
    quantity: int = Field(1, ge=1, description="Units to add")
    customizations: Dict[str, Any] = Field(default_factory=dict, description="Selected product options")


class QuantityRequest(BaseModel):
    """Request model for changing a line item's quantity."""
    quantity: int = Field(..., description="New quantity; values below 1 are ignored")


class CartItemResponse(BaseModel):
    """Cart item response model."""
    id: ProductRef
    name: str
    quantity: int
    unit_price: float
    subtotal: float
    image: str = ""
    customizations: Dict[str, Any] = Field(default_factory=dict)


class CartResponse(BaseModel):
    """Cart response model."""
    items: List[CartItemResponse]
    item_count: int
    total_items: int
    subtotal: float
    subtotal_formatted: str
    totals: OrderTotals
    notifications: List[NotificationResponse] = Field(default_factory=list)


def _cart_response(shopper: StorefrontSession) -> CartResponse:
    summary = shopper.cart.get_cart_summary()
    return CartResponse(
        items=[CartItemResponse(**item) for item in summary["items"]],
        item_count=summary["item_count"],
        total_items=summary["total_items"],
        subtotal=summary["subtotal"],
        subtotal_formatted=summary["subtotal_formatted"],
        totals=calculate_order_totals(shopper.cart.subtotal),
        notifications=_drain_notifications(shopper)
    )


def _drain_notifications(shopper: StorefrontSession) -> List[NotificationResponse]:
    return [
        NotificationResponse(message=n.message, severity=n.severity.value)
        for n in shopper.notifier.drain()
    ]


@router.get("/cart", response_model=CartResponse, summary="Get user's cart")
def get_cart(shopper: StorefrontSession = Depends(get_shopper)):
    """
    Get the current user's shopping cart.
    
    Returns all line items with quantities, prices, subtotal and the
    shipping/tax breakdown checkout would charge.
    """
    return _cart_response(shopper)


@router.post("/cart/items", response_model=CartResponse, summary="Add a product to the cart")
def add_cart_item(
    request: CartItemRequest,
    db: Session = Depends(get_db),
    shopper: StorefrontSession = Depends(get_shopper)
):
    """Add a catalog product; adding a product already in the cart increases its quantity."""
    product = _load_product(db, request.product_id)
    
    existing = shopper.cart.get_line_item(product.id)
    requested = request.quantity + (existing.quantity if existing else 0)
    if product.stock_quantity < requested:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Insufficient stock. Only {product.stock_quantity} available for '{product.name}'"
        )
    
    shopper.cart.add_to_cart(_snapshot(product), request.quantity, request.customizations)
    return _cart_response(shopper)


@router.patch("/cart/items/{product_id}", response_model=CartResponse, summary="Change quantity")
def update_cart_item(
    product_id: str,
    request: QuantityRequest,
    shopper: StorefrontSession = Depends(get_shopper)
):
    """Set a line item's quantity. Quantities below 1 leave the cart unchanged."""
    shopper.cart.update_quantity(parse_product_ref(product_id), request.quantity)
    return _cart_response(shopper)


@router.delete("/cart/items/{product_id}", response_model=CartResponse, summary="Remove a line item")
def remove_cart_item(
    product_id: str,
    shopper: StorefrontSession = Depends(get_shopper)
):
    """Remove a line item. Unknown products are ignored."""
    shopper.cart.remove_from_cart(parse_product_ref(product_id))
    return _cart_response(shopper)


@router.delete("/cart", response_model=CartResponse, summary="Clear the cart")
def clear_cart(shopper: StorefrontSession = Depends(get_shopper)):
    """Remove every line item."""
    shopper.cart.clear_cart()
    return _cart_response(shopper)


# Wishlist endpoints
class WishlistItemRequest(BaseModel):
    """Request model for saving a product to the wishlist."""
    product_id: int = Field(..., description="Catalog product ID")


class WishlistItemResponse(BaseModel):
    """Wishlist item response model."""
    id: ProductRef
    name: str
    unit_price: float
    image: str = ""


class WishlistResponse(BaseModel):
    """Wishlist response model."""
    items: List[WishlistItemResponse]
    item_count: int
    notifications: List[NotificationResponse] = Field(default_factory=list)


class WishlistMembershipResponse(BaseModel):
    """Whether a product is saved to the wishlist."""
    product_id: ProductRef
    in_wishlist: bool


def _wishlist_response(shopper: StorefrontSession) -> WishlistResponse:
    items = shopper.wishlist.items
    return WishlistResponse(
        items=[
            WishlistItemResponse(id=item.id, name=item.name, unit_price=float(item.unit_price), image=item.image)
            for item in items
        ],
        item_count=len(items),
        notifications=_drain_notifications(shopper)
    )


@router.get("/wishlist", response_model=WishlistResponse, summary="Get user's wishlist")
def get_wishlist(shopper: StorefrontSession = Depends(get_shopper)):
    """Get the products the shopper saved for later."""
    return _wishlist_response(shopper)


@router.post("/wishlist/items", response_model=WishlistResponse, summary="Save a product")
def add_wishlist_item(
    request: WishlistItemRequest,
    db: Session = Depends(get_db),
    shopper: StorefrontSession = Depends(get_shopper)
):
    """Save a catalog product. Saving it twice leaves the wishlist unchanged."""
    product = _load_product(db, request.product_id)
    shopper.wishlist.add_to_wishlist(_snapshot(product))
    return _wishlist_response(shopper)


@router.get(
    "/wishlist/items/{product_id}",
    response_model=WishlistMembershipResponse,
    summary="Check wishlist membership"
)
def check_wishlist_item(
    product_id: str,
    shopper: StorefrontSession = Depends(get_shopper)
):
    """Check whether a product is in the wishlist."""
    ref = parse_product_ref(product_id)
    return WishlistMembershipResponse(product_id=ref, in_wishlist=shopper.wishlist.is_in_wishlist(ref))


@router.delete("/wishlist/items/{product_id}", response_model=WishlistResponse, summary="Remove a saved product")
def remove_wishlist_item(
    product_id: str,
    shopper: StorefrontSession = Depends(get_shopper)
):
    """Remove a product from the wishlist. Unknown products are ignored."""
    shopper.wishlist.remove_from_wishlist(parse_product_ref(product_id))
    return _wishlist_response(shopper)


@router.delete("/wishlist", response_model=WishlistResponse, summary="Clear the wishlist")
def clear_wishlist(shopper: StorefrontSession = Depends(get_shopper)):
    """Remove every saved product."""
    shopper.wishlist.clear_wishlist()
    return _wishlist_response(shopper)


# Checkout and order endpoints
class CheckoutResponse(BaseModel):
    """Placed order with the messages raised during checkout."""
    order: OrderResponse
    notifications: List[NotificationResponse] = Field(default_factory=list)


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order"
)
def checkout(
    request: CheckoutRequest,
    session_id: str = Depends(get_session_id),
    db: Session = Depends(get_db),
    shopper: StorefrontSession = Depends(get_shopper)
):
    """
    Place an order for the current cart.
    
    The cart is cleared once the order is stored. Payment is simulated:
    cash on delivery stays pending, card and UPI are marked paid.
    """
    try:
        order = place_order(db, shopper, request, session_id)
    except CheckoutError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    
    return CheckoutResponse(
        order=OrderResponse.model_validate(order),
        notifications=_drain_notifications(shopper)
    )


@router.get("/orders", response_model=List[OrderResponse], summary="Get user's orders")
def list_orders(
    session_id: str = Depends(get_session_id),
    db: Session = Depends(get_db),
    shopper: StorefrontSession = Depends(get_shopper)
):
    """
    Get the order history, newest first.
    
    Signed-in shoppers see every order placed under their account; guests
    see the guest orders of their browser session.
    """
    orders = get_orders(db, user_id=shopper.identity_service.current_user_id, session_id=session_id)
    return [OrderResponse.model_validate(order) for order in orders]


@router.get("/orders/{order_id}", response_model=OrderResponse, summary="Get one order")
def get_order_detail(
    order_id: int,
    session_id: str = Depends(get_session_id),
    db: Session = Depends(get_db),
    shopper: StorefrontSession = Depends(get_shopper)
):
    """
    Get a single order with its items.
    
    Orders placed by another account or another browser session are
    reported as not found.
    """
    order = get_order(db, order_id, user_id=shopper.identity_service.current_user_id, session_id=session_id)
    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Order {order_id} not found"
        )
    return OrderResponse.model_validate(order)


# Profile endpoints
def _require_user(shopper: StorefrontSession) -> str:
    user_id = shopper.identity_service.current_user_id
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in to view your profile"
        )
    return user_id


@router.get("/profile", response_model=ProfileOverviewResponse, summary="Get profile overview")
def get_user_profile(
    db: Session = Depends(get_db),
    shopper: StorefrontSession = Depends(get_shopper)
):
    """Get the signed-in user's profile and their most recent orders."""
    user_id = _require_user(shopper)
    profile = get_profile(db, user_id)
    if not profile:
        profile = update_profile(db, user_id, ProfileUpdate())
    
    recent_orders = get_orders(db, user_id=user_id, limit=settings.profile_recent_orders)
    return ProfileOverviewResponse(
        profile=ProfileResponse.model_validate(profile),
        recent_orders=[OrderResponse.model_validate(order) for order in recent_orders]
    )


@router.put("/profile", response_model=ProfileResponse, summary="Update profile")
def put_user_profile(
    request: ProfileUpdate,
    db: Session = Depends(get_db),
    shopper: StorefrontSession = Depends(get_shopper)
):
    """Update the signed-in user's name and phone number."""
    user_id = _require_user(shopper)
    profile = update_profile(db, user_id, request)
    print(f"[PROFILE] Updated profile {user_id}")
    return ProfileResponse.model_validate(profile)


# Product endpoints
class ProductListResponse(BaseModel):
    """Product list response model."""
    products: List[ProductResponse]
    total: int
    page: int
    page_size: int


SORT_ORDERS = {
    "featured": (Product.featured.desc(), Product.created_at.desc(), Product.id.desc()),
    "newest": (Product.created_at.desc(), Product.id.desc()),
    "price-low": (Product.price.asc(), Product.id.asc()),
    "price-high": (Product.price.desc(), Product.id.asc()),
}


@router.get("/products", response_model=ProductListResponse, summary="Get products with search and filters")
def get_products(
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None, description="Search query for product name or description"),
    category: Optional[List[str]] = Query(None, description="Filter by one or more categories"),
    material: Optional[List[str]] = Query(None, description="Filter by one or more materials"),
    min_price: Optional[float] = Query(None, ge=0, description="Minimum price filter"),
    max_price: Optional[float] = Query(None, ge=0, description="Maximum price filter"),
    featured: Optional[bool] = Query(None, description="Filter by featured status"),
    sort_by: Literal["featured", "newest", "price-low", "price-high"] = Query("featured", description="Sort order"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(20, ge=1, le=100, description="Number of items per page")
):
    """
    Browse active products.
    
    Supports:
    - Text search across product name and description
    - Filtering by categories, materials, price range and featured status
    - Sorting by featured, newest or price
    - Pagination with configurable page size
    """
    query = db.query(Product).filter(Product.is_active == True)  # noqa: E712
    
    if search:
        search_term = f"%{search.lower()}%"
        query = query.filter(
            or_(
                Product.name.ilike(search_term),
                Product.description.ilike(search_term)
            )
        )
    
    if category:
        query = query.filter(Product.category.in_(category))
    if material:
        query = query.filter(Product.material.in_(material))
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)
    if featured is not None:
        query = query.filter(Product.featured == featured)
    
    total = query.count()
    offset = (page - 1) * page_size
    products = query.order_by(*SORT_ORDERS[sort_by]).offset(offset).limit(page_size).all()
    
    return ProductListResponse(
        products=[ProductResponse.model_validate(product) for product in products],
        total=total,
        page=page,
        page_size=page_size
    )
