"""FastAPI application entry point."""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field, ValidationError

from .config import Settings, settings
from .controller import BookBuddyController
from ..domain.entities import (
    Book,
    BookGoals,
    Highlight,
    OnboardingStep,
    ReadingGoals,
    ReadingSchedule,
    ReadingStatus,
    UserIdentity,
)
from ..domain.interfaces.auth_provider import AuthenticationError
from ..infrastructure.dynamodb_book_repository import DynamoDBBookRepository
from ..infrastructure.dynamodb_user_settings_provider import DynamoDBUserSettingsProvider
from ..infrastructure.jwt_auth_provider import JwtAuthProvider
from ..infrastructure.local_user_settings_provider import LocalUserSettingsProvider
from ..infrastructure.snapshot_storage import JsonFileSnapshotStorage

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app instance
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

bearer_scheme = HTTPBearer(auto_error=False)


def build_controller(config: Settings) -> BookBuddyController:
    """Wire the providers selected by ``config.storage_backend`` into a controller."""
    if config.storage_backend == "dynamodb":
        settings_provider = DynamoDBUserSettingsProvider(
            table_name=config.settings_table_name, region_name=config.aws_region
        )
        book_repository = DynamoDBBookRepository(
            table_name=config.books_table_name, region_name=config.aws_region
        )
    else:
        settings_provider = LocalUserSettingsProvider()
        book_repository = None

    logger.info(f"Using {config.storage_backend} storage backend")
    return BookBuddyController(
        snapshot_storage=JsonFileSnapshotStorage(config.snapshot_dir),
        settings_provider=settings_provider,
        auth_provider=JwtAuthProvider(
            secret_key=config.jwt_secret_key,
            algorithm=config.jwt_algorithm,
            expires_minutes=config.jwt_expires_minutes,
        ),
        book_repository=book_repository,
        snapshot_key=config.snapshot_key,
        recent_highlights_limit=config.recent_highlights_limit,
    )


# Initialize controller with injected dependencies
controller = build_controller(settings)


# ── Request bodies ─────────────────────────────────────────


class TokenRequest(BaseModel):
    user_id: str = Field(min_length=1)
    email: Optional[str] = None
    name: Optional[str] = None


class ProgressUpdate(BaseModel):
    current_page: int = Field(ge=0)


class StatusUpdate(BaseModel):
    status: ReadingStatus


class StepChange(BaseModel):
    step: OnboardingStep


class OnboardingDataUpdate(BaseModel):
    selected_genres: Optional[list[str]] = None
    book_goals: Optional[BookGoals] = None
    reading_schedule: Optional[ReadingSchedule] = None


class SettingsUpdate(BaseModel):
    reading_goals: Optional[ReadingGoals] = None
    selected_genres: Optional[list[str]] = None


# ── Dependencies ───────────────────────────────────────────


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> UserIdentity:
    """Resolve the bearer token into the signed-in user."""
    token = credentials.credentials if credentials else None
    try:
        return controller.authenticate(token)
    except AuthenticationError as e:
        logger.warning(f"Rejected request: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


def _notifications(user_id: str) -> list[dict]:
    return [toast.model_dump() for toast in controller.drain_notifications(user_id)]


def _onboarding_payload(user_id: str) -> dict:
    onboarding = controller.onboarding_for(user_id)
    return {
        "state": onboarding.state.model_dump(mode="json"),
        "is_first_step": onboarding.is_first_step,
        "is_last_step": onboarding.is_last_step,
        "notifications": _notifications(user_id),
    }


# ── Endpoints ──────────────────────────────────────────────


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return controller.get_health_status()


@app.post("/auth/token")
async def issue_token(request: TokenRequest):
    """Sign a user in and return a bearer token for the other endpoints."""
    identity = UserIdentity(**request.model_dump())
    token = controller.sign_in(identity)
    return {"access_token": token, "token_type": "bearer", "user_id": identity.user_id}


@app.post("/auth/signout")
async def sign_out(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    user: UserIdentity = Depends(get_current_user),
):
    """Revoke the bearer token used for this request."""
    controller.sign_out(credentials.credentials)
    return {"signed_out": True, "user_id": user.user_id}


@app.get("/books")
async def get_books(
    status_filter: Optional[ReadingStatus] = Query(None, alias="status"),
    user: UserIdentity = Depends(get_current_user),
):
    """List the books in the signed-in user's library.

    Args:
        status_filter: Only return books in this reading status.

    Returns:
        The user's books in the order they were added.
    """
    try:
        books = await controller.list_books(user.user_id, status_filter)
        return {"books": books, "user_id": user.user_id}
    except Exception as e:
        logger.error(f"Error getting books for user {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/books", status_code=status.HTTP_201_CREATED)
async def add_book(book: Book, user: UserIdentity = Depends(get_current_user)):
    """Add a book; duplicates are reported as notifications instead of being added."""
    try:
        added = await controller.add_book(user.user_id, book)
        return {"book": added, "added": added is not None, "notifications": _notifications(user.user_id)}
    except Exception as e:
        logger.error(f"Error adding book for user {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.delete("/books/{book_id}")
async def delete_book(book_id: str, user: UserIdentity = Depends(get_current_user)):
    """Remove a book and its highlights from the library."""
    try:
        book = await controller.delete_book(user.user_id, book_id)
        return {"deleted": True, "book": book}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting book {book_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.put("/books/{book_id}/progress")
async def update_progress(
    book_id: str, update: ProgressUpdate, user: UserIdentity = Depends(get_current_user)
):
    """Record the last page read for a book."""
    try:
        book = await controller.record_progress(user.user_id, book_id, update.current_page)
        return {"book": book}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating progress of book {book_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.put("/books/{book_id}/status")
async def change_status(
    book_id: str, update: StatusUpdate, user: UserIdentity = Depends(get_current_user)
):
    """Move a book to a new reading status.

    A transition refused by the status rules is not an HTTP error: the
    response carries ``allowed: false``, the reason and the toast to show.
    """
    try:
        result = await controller.change_status(user.user_id, book_id, update.status)
        book = await controller.get_book(user.user_id, book_id)
        return {
            "allowed": result.allowed,
            "reason": result.reason,
            "book": book,
            "notifications": _notifications(user.user_id),
        }
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error changing status of book {book_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/highlights")
async def get_highlights(
    book_id: Optional[str] = Query(None, description="Only highlights of this book"),
    favorites: bool = Query(False, description="Only favorite highlights"),
    user: UserIdentity = Depends(get_current_user),
):
    """List the signed-in user's highlights."""
    highlights = await controller.list_highlights(user.user_id, book_id, favorites)
    return {"highlights": highlights, "user_id": user.user_id}


@app.get("/highlights/recent")
async def get_recent_highlights(
    limit: Optional[int] = Query(None, ge=0, description="Number of highlights to return"),
    user: UserIdentity = Depends(get_current_user),
):
    """Most recently created highlights first."""
    highlights = await controller.recent_highlights(user.user_id, limit)
    return {"highlights": highlights, "user_id": user.user_id}


@app.post("/highlights", status_code=status.HTTP_201_CREATED)
async def add_highlight(highlight: Highlight, user: UserIdentity = Depends(get_current_user)):
    """Capture a highlight from a book in the library."""
    try:
        await controller.get_book(user.user_id, highlight.book_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        added = await controller.add_highlight(user.user_id, highlight)
        return {"highlight": added}
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error(f"Error adding highlight for user {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/highlights/{highlight_id}/favorite")
async def toggle_favorite(highlight_id: str, user: UserIdentity = Depends(get_current_user)):
    """Flip the favorite flag of a highlight."""
    try:
        highlight = await controller.toggle_favorite(user.user_id, highlight_id)
        return {"highlight": highlight}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.delete("/highlights/{highlight_id}")
async def delete_highlight(highlight_id: str, user: UserIdentity = Depends(get_current_user)):
    try:
        highlight = await controller.delete_highlight(user.user_id, highlight_id)
        return {"deleted": True, "highlight": highlight}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting highlight {highlight_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/stats")
async def get_stats(user: UserIdentity = Depends(get_current_user)):
    """Dashboard counters for the current month and year."""
    stats = await controller.get_stats(user.user_id)
    return stats.model_dump()


@app.get("/onboarding")
async def get_onboarding(user: UserIdentity = Depends(get_current_user)):
    """Current state of the user's onboarding flow."""
    return _onboarding_payload(user.user_id)


@app.post("/onboarding/step")
async def change_onboarding_step(change: StepChange, user: UserIdentity = Depends(get_current_user)):
    """Jump to a step; skipping ahead or leaving an incomplete step is refused."""
    moved = controller.change_onboarding_step(user.user_id, change.step)
    return {"moved": moved, **_onboarding_payload(user.user_id)}


@app.post("/onboarding/next")
async def next_onboarding_step(user: UserIdentity = Depends(get_current_user)):
    moved = controller.next_onboarding_step(user.user_id)
    return {"moved": moved, **_onboarding_payload(user.user_id)}


@app.post("/onboarding/previous")
async def previous_onboarding_step(user: UserIdentity = Depends(get_current_user)):
    moved = controller.previous_onboarding_step(user.user_id)
    return {"moved": moved, **_onboarding_payload(user.user_id)}


@app.put("/onboarding/data")
async def update_onboarding_data(
    update: OnboardingDataUpdate, user: UserIdentity = Depends(get_current_user)
):
    """Merge the given fields into the onboarding form."""
    try:
        controller.update_onboarding_data(user.user_id, **update.model_dump(exclude_none=True))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _onboarding_payload(user.user_id)


@app.post("/onboarding/submit")
async def submit_onboarding(user: UserIdentity = Depends(get_current_user)):
    """Save the onboarding preferences to the user's settings."""
    try:
        saved = controller.submit_onboarding(user.user_id)
        return {"settings": saved, "notifications": _notifications(user.user_id)}
    except Exception as e:
        logger.error(f"Error submitting onboarding for user {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Could not save onboarding preferences")


@app.get("/settings")
async def get_settings(user: UserIdentity = Depends(get_current_user)):
    return controller.get_settings(user.user_id)


@app.put("/settings")
async def update_settings(update: SettingsUpdate, user: UserIdentity = Depends(get_current_user)):
    """Update reading goals and genre preferences."""
    try:
        return controller.update_settings(user.user_id, **update.model_dump(exclude_none=True))
    except Exception as e:
        logger.error(f"Error updating settings for user {user.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
