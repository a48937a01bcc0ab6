from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from .auth.config import DEFAULT_AUTH_CONFIG
from .auth.dependencies import require_admin, require_user, session_user
from .auth.models import (
    ForgotPasswordRequest,
    LoginRequest,
    ProfileResponse,
    ProfileUpdateResponse,
    ResetPasswordRequest,
    SignupRequest,
    UserOut,
)
from .auth.otp import OtpError, discard_otps, issue_otp, verify_otp
from .auth.users import (
    UserExistsError,
    authenticate,
    create_user,
    get_user,
    get_user_by_email,
    set_password,
    update_profile,
)
from .data_ingestion.config import DEFAULT_INGESTION_CONFIG
from .data_ingestion.ingest import run_ingestion
from .mail.sender import MailDeliveryError, send_otp_email
from .recipes.config import DEFAULT_UPLOAD_CONFIG
from .recipes.matcher import CatalogQueryError
from .recipes.models import FilterRequest, MessageResponse, RecipeOut, RecipeSuggestion
from .recipes.service import (
    RecipeForm,
    add_system_recipe,
    create_user_recipe,
    delete_user_recipe,
    filter_recipes,
    get_recipe_or_404,
    list_system_recipes,
    list_user_recipes,
    suggest_recipes,
    update_user_recipe,
)
from .recipes.uploads import remove_image, save_image

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if DEFAULT_INGESTION_CONFIG.load_on_startup:
        run_ingestion(DEFAULT_INGESTION_CONFIG)
    yield


app = FastAPI(title="Ezy Cook Recipe API", version="1.0.0", lifespan=lifespan)
app.add_middleware(SessionMiddleware, secret_key=DEFAULT_AUTH_CONFIG.session_secret)


# ── Upstream failures ────────────────────────────────────────────────────


@app.exception_handler(CatalogQueryError)
async def catalog_query_failed(request: Request, exc: CatalogQueryError) -> JSONResponse:
    logger.error("Recipe catalog query failed on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(MailDeliveryError)
async def mail_delivery_failed(request: Request, exc: MailDeliveryError) -> JSONResponse:
    logger.error("Mail delivery failed on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Welcome to the Ezy Cook API!"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── User endpoints ───────────────────────────────────────────────────────


@app.post("/api/users/signup", response_model=UserOut, status_code=201)
def signup(body: SignupRequest, request: Request) -> dict:
    if not body.username or not body.email or not body.password:
        raise HTTPException(status_code=400, detail="Please fill all required fields")
    try:
        user = create_user(body.username, body.email, body.password)
    except UserExistsError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    request.session["user"] = session_user(user)
    return user


@app.post("/api/users/login", response_model=UserOut)
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid username or password")
    request.session["user"] = session_user(user)
    return user


@app.post("/api/users/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.post("/api/users/forgot-password", response_model=MessageResponse)
def forgot_password(body: ForgotPasswordRequest) -> dict:
    if get_user_by_email(body.email) is None:
        raise HTTPException(status_code=404, detail="User not found")
    code = issue_otp(body.email)
    send_otp_email(
        body.email, code, ttl_minutes=DEFAULT_AUTH_CONFIG.otp_ttl_seconds // 60,
    )
    return {"message": "OTP sent to email"}


@app.post("/api/users/verify-otp", response_model=MessageResponse)
@app.put("/api/users/reset-password", response_model=MessageResponse)
def reset_password(body: ResetPasswordRequest) -> dict:
    """Both routes check the OTP and set the new password in one step."""
    try:
        verify_otp(body.email, body.otp)
    except OtpError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not set_password(body.email, body.new_password):
        raise HTTPException(status_code=404, detail="User not found")
    discard_otps(body.email)
    return {"message": "Password reset successful"}


def _current_user_record(user: dict) -> dict:
    record = get_user(user["id"])
    if record is None:
        raise HTTPException(status_code=404, detail="User not found")
    return record


@app.get("/api/users/profile", response_model=ProfileResponse)
def get_profile(user: dict = Depends(require_user)) -> dict:
    return {"message": "Profile fetched successfully", "user": _current_user_record(user)}


@app.put("/api/users/profile", response_model=ProfileUpdateResponse)
def put_profile(
    request: Request,
    name: str | None = Form(None),
    username: str | None = Form(None),
    email: str | None = Form(None),
    phone_number: str | None = Form(None, alias="phoneNumber"),
    profile_image: UploadFile | None = File(None, alias="profileImage"),
    user: dict = Depends(require_user),
) -> dict:
    current = _current_user_record(user)
    changes: dict[str, str | None] = {
        "name": name,
        "username": username,
        "email": email,
        "phoneNumber": phone_number,
    }
    if profile_image is not None and profile_image.filename:
        try:
            changes["profileImage"] = save_image(profile_image, "profileImage")
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        result = update_profile(user["id"], changes)
    except UserExistsError as exc:
        if changes.get("profileImage"):
            remove_image(changes["profileImage"])
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if result is None:
        raise HTTPException(status_code=404, detail="User not found")

    updated, changed = result
    if "profileImage" in changed and current.get("profileImage"):
        remove_image(current["profileImage"])
    request.session["user"] = session_user(updated)
    return {"message": "Profile updated successfully", "user": updated, "changes": changed}


# ── System recipe endpoints ──────────────────────────────────────────────


@app.get("/api/recipes", response_model=list[RecipeOut])
def all_recipes() -> list[dict]:
    return list_system_recipes()


@app.get("/api/recipes/suggest/search", response_model=list[RecipeSuggestion])
def suggest(query: str | None = None) -> list[dict]:
    return suggest_recipes(query)


@app.post("/api/recipes/filter", response_model=list[RecipeOut])
def filter_endpoint(body: FilterRequest) -> list[dict]:
    return filter_recipes(body)


@app.post("/api/recipes/system", response_model=RecipeOut, status_code=201)
def create_system_recipe(
    title: str | None = Form(None),
    description: str | None = Form(None),
    ingredients: str | None = Form(None),
    tools: str | None = Form(None),
    meal_time: str | None = Form(None, alias="mealTime"),
    servings: str | None = Form(None),
    video_url: str | None = Form(None, alias="videoUrl"),
    image_url: str | None = Form(None, alias="imageUrl"),
    image: UploadFile | None = File(None),
    user: dict = Depends(require_admin),
) -> dict:
    form = RecipeForm(
        title=title,
        description=description,
        ingredients=ingredients,
        tools=tools,
        meal_time=meal_time,
        servings=servings,
        video_url=video_url,
    )
    return add_system_recipe(user, form, image=image, image_url=image_url)


# ── My recipes ───────────────────────────────────────────────────────────


@app.get("/api/recipes/my-recipes", response_model=list[RecipeOut])
def my_recipes(user: dict = Depends(require_user)) -> list[dict]:
    return list_user_recipes(user["id"])


@app.post("/api/recipes/my-recipes", response_model=RecipeOut, status_code=201)
def create_my_recipe(
    title: str | None = Form(None),
    description: str | None = Form(None),
    ingredients: str | None = Form(None),
    tools: str | None = Form(None),
    meal_time: str | None = Form(None, alias="mealTime"),
    servings: str | None = Form(None),
    video_url: str | None = Form(None, alias="videoUrl"),
    image: UploadFile | None = File(None),
    user: dict = Depends(require_user),
) -> dict:
    form = RecipeForm(
        title=title,
        description=description,
        ingredients=ingredients,
        tools=tools,
        meal_time=meal_time,
        servings=servings,
        video_url=video_url,
    )
    return create_user_recipe(user, form, image=image)


@app.put("/api/recipes/my-recipes/{recipe_id}", response_model=RecipeOut)
def update_my_recipe(
    recipe_id: str,
    title: str | None = Form(None),
    description: str | None = Form(None),
    ingredients: str | None = Form(None),
    tools: str | None = Form(None),
    meal_time: str | None = Form(None, alias="mealTime"),
    servings: str | None = Form(None),
    video_url: str | None = Form(None, alias="videoUrl"),
    image: UploadFile | None = File(None),
    user: dict = Depends(require_user),
) -> dict:
    form = RecipeForm(
        title=title,
        description=description,
        ingredients=ingredients,
        tools=tools,
        meal_time=meal_time,
        servings=servings,
        video_url=video_url,
    )
    return update_user_recipe(recipe_id, user, form, image=image)


@app.delete("/api/recipes/my-recipes/{recipe_id}", response_model=MessageResponse)
def delete_my_recipe(recipe_id: str, user: dict = Depends(require_user)) -> dict:
    delete_user_recipe(recipe_id, user)
    return {"message": "Recipe deleted successfully"}


# ── Single recipe (system or user) ───────────────────────────────────────


@app.get("/api/recipes/{recipe_id}", response_model=RecipeOut)
def recipe_by_id(recipe_id: str) -> dict:
    return get_recipe_or_404(recipe_id)


# ── Static uploads ───────────────────────────────────────────────────────


app.mount(
    "/uploads",
    StaticFiles(directory=str(DEFAULT_UPLOAD_CONFIG.upload_dir), check_dir=False),
    name="uploads",
)
