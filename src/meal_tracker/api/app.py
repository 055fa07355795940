"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from meal_tracker.api.models import (
    MealDescriptionRequest,
    PersonalInfoPayload,
    ProfileUpdateRequest,
)
from meal_tracker.app_logging import configure_logging
from meal_tracker.containers import AppContainer
from meal_tracker.domain.analysis import AnalysisOutcome
from meal_tracker.domain.meals import Meal
from meal_tracker.domain.profiles import Principal, UserProfile
from meal_tracker.domain.stats import DailySummary
from meal_tracker.errors import InvalidInputError, MealNotFoundError, StorageError
from meal_tracker.services.identity import parse_bearer_token
from meal_tracker.services.profiles import recommend_goals


def _get_container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_principal(
    authorization: str | None = Header(default=None),
    container: AppContainer = Depends(_get_container),
) -> Principal:
    """Resolve the bearer token to the signed-in user."""
    token = parse_bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    principal = container.identity_provider.verify_token(token)
    if principal is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return principal


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level.upper())
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(
        _request: Request, exc: InvalidInputError
    ) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(MealNotFoundError)
    async def not_found_handler(
        _request: Request, exc: MealNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(
        _request: Request, exc: StorageError
    ) -> JSONResponse:
        logger.warning("Storage failure surfaced to client: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/analyze")
    async def analyze_meal(
        body: MealDescriptionRequest,
        request: Request,
        _principal: Principal = Depends(require_principal),
    ) -> dict[str, object]:
        """Analyze a description without saving it."""
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.meal_service.preview(body.description)
        return _outcome_payload(outcome)

    @app.post("/meals", status_code=status.HTTP_201_CREATED)
    async def add_meal(
        body: MealDescriptionRequest,
        request: Request,
        principal: Principal = Depends(require_principal),
    ) -> dict[str, object]:
        """Analyze and log a new meal."""
        state_container: AppContainer = request.app.state.container
        meal = await state_container.meal_service.log_meal(
            principal.uid, body.description
        )
        logger.info("Meal logged: meal_id=%s", meal.id)
        return _meal_payload(meal)

    @app.get("/meals/today")
    async def todays_meals(
        request: Request, principal: Principal = Depends(require_principal)
    ) -> dict[str, object]:
        """Return today's meals, newest first."""
        state_container: AppContainer = request.app.state.container
        meals = state_container.meal_service.list_today(principal.uid)
        return {
            "date": state_container.meal_service.today(),
            "meals": [_meal_payload(meal) for meal in meals],
        }

    @app.put("/meals/{meal_id}")
    async def edit_meal(
        meal_id: str,
        body: MealDescriptionRequest,
        request: Request,
        principal: Principal = Depends(require_principal),
    ) -> dict[str, object]:
        """Re-analyze a meal with a new description."""
        state_container: AppContainer = request.app.state.container
        meal = await state_container.meal_service.edit_meal(
            principal.uid, meal_id, body.description
        )
        return _meal_payload(meal)

    @app.delete("/meals/{meal_id}")
    async def delete_meal(
        meal_id: str,
        request: Request,
        principal: Principal = Depends(require_principal),
    ) -> dict[str, str]:
        """Delete a meal."""
        state_container: AppContainer = request.app.state.container
        state_container.meal_service.delete_meal(principal.uid, meal_id)
        return {"status": "deleted"}

    @app.get("/summary/today")
    async def todays_summary(
        request: Request, principal: Principal = Depends(require_principal)
    ) -> dict[str, object]:
        """Return today's totals compared with the user's goals."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.summary_service.get_today(principal)
        return _summary_payload(summary)

    @app.get("/export/today")
    async def export_today(
        request: Request, principal: Principal = Depends(require_principal)
    ) -> JSONResponse:
        """Return today's meals as a downloadable JSON document."""
        state_container: AppContainer = request.app.state.container
        document = state_container.summary_service.export_today(principal)
        filename = f"meals-{state_container.meal_service.today()}.json"
        return JSONResponse(
            content=document,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.get("/profile")
    async def get_profile(
        request: Request, principal: Principal = Depends(require_principal)
    ) -> dict[str, object]:
        """Return the user's profile and goals."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.get_profile(principal)
        return _profile_payload(profile)

    @app.put("/profile")
    async def update_profile(
        body: ProfileUpdateRequest,
        request: Request,
        principal: Principal = Depends(require_principal),
    ) -> dict[str, object]:
        """Save display name, goals and personal info."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.profile_service.save_profile(
            principal,
            display_name=body.display_name,
            goals=body.goals.to_domain(),
            personal_info=(
                body.personal_info.to_domain() if body.personal_info else None
            ),
        )
        return _profile_payload(profile)

    @app.post("/profile/recommended-goals")
    async def recommended_goals(
        body: PersonalInfoPayload,
        _principal: Principal = Depends(require_principal),
    ) -> dict[str, float]:
        """Return goals derived from personal info without saving them."""
        return recommend_goals(body.to_domain()).to_dict()

    return app


def _outcome_payload(outcome: AnalysisOutcome) -> dict[str, object]:
    return {
        "result": outcome.result.to_dict(),
        "source": str(outcome.source),
        "fault": str(outcome.fault.reason) if outcome.fault else None,
    }


def _meal_payload(meal: Meal) -> dict[str, object]:
    return {
        "id": meal.id,
        "description": meal.description,
        "items": [item.to_dict() for item in meal.items],
        "totals": meal.totals.to_dict(),
        "timestamp": meal.timestamp.isoformat(),
        "date": meal.date,
        "updatedAt": meal.updated_at.isoformat() if meal.updated_at else None,
    }


def _summary_payload(summary: DailySummary) -> dict[str, object]:
    return {
        "date": summary.day,
        "totals": summary.totals.to_dict(),
        "displayTotals": {
            "calories": round(summary.totals.calories),
            "protein": round(summary.totals.protein, 1),
            "carbs": round(summary.totals.carbs, 1),
            "fats": round(summary.totals.fats, 1),
        },
        "goals": summary.goals.to_dict(),
        "progress": {
            "calories": summary.progress.calories,
            "protein": summary.progress.protein,
            "carbs": summary.progress.carbs,
            "fats": summary.progress.fats,
        },
        "meals": [_meal_payload(meal) for meal in summary.meals],
    }


def _profile_payload(profile: UserProfile) -> dict[str, object]:
    return {
        "userId": profile.user_id,
        "email": profile.email,
        "displayName": profile.display_name,
        "goals": profile.goals.to_dict(),
        "personalInfo": (
            profile.personal_info.to_dict() if profile.personal_info else None
        ),
    }
