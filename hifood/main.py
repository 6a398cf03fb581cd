from fastapi import FastAPI, Depends, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional

from . import admin, catalog, config, identity, orders, policy
from . import schemas
from .deps import (
    current_session,
    get_facebook_verifier,
    get_google_verifier,
    get_store,
    require_authenticated,
    require_role,
    session_token,
)
from .errors import AppError, InvalidInput
from .logger import get_logger
from .providers import FacebookTokenVerifier, GoogleTokenVerifier
from .sessions import SESSION_COOKIE, destroy_session
from .store import JsonStore, USERS

_logger = get_logger(__name__)

# Initialize runtime configuration from environment (can be toggled at runtime)
config.load_from_env()

app = FastAPI(title="Hi Food API")

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=".*",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # malformed bodies are client input errors, reported like InvalidInput
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "invalid body"))
    return JSONResponse(status_code=400, content={"detail": "; ".join(problems) or "invalid request body"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    _logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "internal error"})


def _set_session_cookie(response: Response, token: str):
    response.set_cookie(
        SESSION_COOKIE,
        token,
        httponly=True,
        samesite="lax",
        secure=config.state.cookie_secure,
    )


@app.get("/health")
async def health():
    return {"status": "ok"}


# -------------------- Auth --------------------
@app.post("/api/register")
async def register(payload: Optional[schemas.RegisterRequest] = None, store: JsonStore = Depends(get_store)):
    payload = payload or schemas.RegisterRequest()
    identity.register(store, payload.name, payload.email, payload.password, phone=payload.phone)
    return {"message": "registered"}


@app.post("/api/login")
async def login(
    response: Response,
    payload: Optional[schemas.LoginRequest] = None,
    store: JsonStore = Depends(get_store),
):
    payload = payload or schemas.LoginRequest()
    user = identity.authenticate_password(store, payload.password, email=payload.email, phone=payload.phone)
    token = identity.login(store, user)
    _set_session_cookie(response, token)
    return {"message": "logged in", "user": identity.public_user(user)}


@app.post("/api/login-google")
async def login_google(
    response: Response,
    payload: Optional[schemas.GoogleLoginRequest] = None,
    store: JsonStore = Depends(get_store),
    verifier: GoogleTokenVerifier = Depends(get_google_verifier),
):
    payload = payload or schemas.GoogleLoginRequest()
    if not payload.idToken:
        raise InvalidInput("idToken is required")
    verified = await verifier.verify(payload.idToken)
    user = identity.find_or_create_federated(store, verified)
    _set_session_cookie(response, identity.login(store, user))
    return {"user": identity.public_user(user)}


@app.post("/api/login-facebook")
async def login_facebook(
    response: Response,
    payload: Optional[schemas.FacebookLoginRequest] = None,
    store: JsonStore = Depends(get_store),
    verifier: FacebookTokenVerifier = Depends(get_facebook_verifier),
):
    payload = payload or schemas.FacebookLoginRequest()
    if not payload.accessToken:
        raise InvalidInput("accessToken is required")
    verified = await verifier.verify(payload.accessToken)
    user = identity.find_or_create_federated(store, verified)
    _set_session_cookie(response, identity.login(store, user))
    return {"user": identity.public_user(user)}


@app.post("/api/logout")
async def logout(request: Request, response: Response, store: JsonStore = Depends(get_store)):
    destroy_session(store, session_token(request))
    response.delete_cookie(SESSION_COOKIE)
    return {"message": "logged out"}


@app.get("/api/me")
async def me(session: Optional[dict] = Depends(current_session), store: JsonStore = Depends(get_store)):
    if session is None:
        return {"user": None}
    user = store.collection(USERS).get(session["userId"])
    return {"user": schemas.UserProfile(**identity.profile(user)) if user else None}


# -------------------- Products --------------------
@app.get("/api/products")
async def get_products(store: JsonStore = Depends(get_store)):
    return {"products": catalog.list_products(store)}


@app.post("/api/products", dependencies=[Depends(require_role(policy.PRODUCTS_WRITE))])
async def create_product(payload: schemas.ProductFields, store: JsonStore = Depends(get_store)):
    return {"product": catalog.create_product(store, payload.model_dump())}


@app.put("/api/products/{product_id}", dependencies=[Depends(require_role(policy.PRODUCTS_WRITE))])
async def update_product(product_id: str, payload: schemas.ProductFields, store: JsonStore = Depends(get_store)):
    return {"product": catalog.update_product(store, product_id, payload.model_dump())}


@app.delete("/api/products/{product_id}", dependencies=[Depends(require_role(policy.PRODUCTS_WRITE))])
async def delete_product(product_id: str, store: JsonStore = Depends(get_store)):
    catalog.delete_product(store, product_id)
    return {"message": "product deleted"}


# -------------------- Orders --------------------
@app.get("/api/orders", dependencies=[Depends(require_role(policy.ORDERS_LIST))])
async def get_orders(store: JsonStore = Depends(get_store)):
    return {"orders": orders.list_orders(store)}


@app.post("/api/orders")
async def create_order(
    payload: schemas.OrderCreate,
    user_id: str = Depends(require_authenticated),
    store: JsonStore = Depends(get_store),
):
    items = [item.model_dump() for item in payload.items] if payload.items else None
    order = orders.create_order(
        store,
        items,
        payload.total,
        customer_name=payload.customerName,
        note=payload.note,
        address=payload.address,
        user_id=user_id,
    )
    return {"order": order}


@app.put("/api/orders/{order_id}", dependencies=[Depends(require_role(policy.ORDERS_UPDATE))])
async def update_order(order_id: str, payload: schemas.OrderStatusUpdate, store: JsonStore = Depends(get_store)):
    return {"order": orders.update_status(store, order_id, payload.status)}


@app.delete("/api/orders/{order_id}", dependencies=[Depends(require_role(policy.ORDERS_DELETE))])
async def delete_order(order_id: str, store: JsonStore = Depends(get_store)):
    orders.delete_order(store, order_id)
    return {"message": "order deleted"}


@app.post("/api/calc-total", response_model=schemas.TotalRead)
async def calc_total(payload: Optional[schemas.CalcTotalRequest] = None, store: JsonStore = Depends(get_store)):
    items = payload.items if payload else None
    return orders.quote(store, [item.model_dump() for item in items or []])


# -------------------- Users / admin --------------------
@app.get("/api/users", dependencies=[Depends(require_role(policy.USERS_LIST))])
async def get_users(store: JsonStore = Depends(get_store)):
    return {"users": admin.list_users(store)}


@app.delete("/api/users/{user_id}", dependencies=[Depends(require_role(policy.USERS_DELETE))])
async def delete_user(user_id: str, store: JsonStore = Depends(get_store)):
    admin.delete_user(store, user_id)
    return {"message": "user deleted"}


@app.get(
    "/api/admin/data",
    response_model=schemas.DashboardRead,
    dependencies=[Depends(require_role(policy.DASHBOARD_READ))],
)
async def admin_data(store: JsonStore = Depends(get_store)):
    return admin.dashboard(store)


@app.get("/api/revenue-stats", dependencies=[Depends(require_role(policy.DASHBOARD_READ))])
async def revenue_stats(store: JsonStore = Depends(get_store)):
    return admin.revenue_stats(store)


@app.get("/api/admin/strict-transitions", dependencies=[Depends(require_role(policy.CONFIG_WRITE))])
async def get_strict_transitions():
    return {"strictTransitions": config.is_strict_transitions()}


@app.post("/api/admin/strict-transitions", dependencies=[Depends(require_role(policy.CONFIG_WRITE))])
async def set_strict_transitions(request: Request):
    """Toggle order status validation. Accepts ``?value=`` or a JSON body ``{"value": ...}``."""
    value = request.query_params.get("value")
    if value is None:
        try:
            body = await request.json()
            if isinstance(body, dict):
                value = body.get("value")
        except ValueError:
            pass

    # Parse boolean-ish values
    if isinstance(value, str):
        val = value.lower() in ("1", "true", "yes", "on")
    else:
        val = bool(value)

    config.set_strict_transitions(val)
    _logger.info(f"Strict order transitions set to {val}")
    return {"strictTransitions": config.is_strict_transitions()}


@app.get("/api/qr-list")
async def qr_list():
    return {"qrImages": admin.list_qr_images(config.state.qr_dir)}
