"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from menu_recommender.api.request_models import RecommendRequest
from menu_recommender.api.serializers import (
    combo_suggestion_payload,
    patterns_payload,
    ranked_item_payload,
    recommendation_payload,
    trends_payload,
)
from menu_recommender.app_logging import configure_logging
from menu_recommender.containers import AppContainer
from menu_recommender.domain.errors import ValidationError
from menu_recommender.services.combos import parse_preferences


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=400, content={"success": False, "message": str(exc)}
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid request body"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/food/recommend")
    async def recommend(body: RecommendRequest, request: Request) -> dict[str, object]:
        """Recommend catalog items for a natural-language query."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.recommendation_service.recommend(
            body.query, body.previous_criteria
        )
        return {
            "success": True,
            "query": result.query,
            "criteria": result.criteria.to_mapping(),
            "recommendations": [
                ranked_item_payload(item) for item in result.recommendations
            ],
            "count": result.count,
            "message": result.message,
            "usedFallback": result.used_fallback,
        }

    @app.get("/api/recommendations/ingredients")
    async def ingredient_recommendations(  # noqa: PLR0913
        request: Request,
        include: str | None = None,
        exclude: str | None = None,
        page: str | None = None,
        limit: str | None = None,
    ) -> dict[str, object]:
        """Rank catalog items by ingredients to include and avoid."""
        state_container: AppContainer = request.app.state.container
        result = state_container.ingredient_service.recommend(
            include=include, exclude=exclude, page=page or 1, limit=limit
        )
        return {
            "success": True,
            "criteria": {"include": result.include, "exclude": result.exclude},
            "items": [ranked_item_payload(item) for item in result.items],
            "count": result.count,
            "total": result.total,
            "page": result.page,
            "limit": result.limit,
        }

    @app.get("/api/food/combo-suggestions")
    async def combo_suggestions(  # noqa: PLR0913
        request: Request,
        mainItemId: str | None = None,  # noqa: N803
        limit: str | None = None,
        preferences: str | None = None,
        nutritional_focus: str | None = None,
    ) -> dict[str, object]:
        """Suggest complementary items for a main item."""
        state_container: AppContainer = request.app.state.container
        suggestions = state_container.combo_service.suggest(
            mainItemId,
            limit=limit,
            preferences=parse_preferences(preferences, nutritional_focus),
        )
        return {
            "success": True,
            "count": len(suggestions),
            "suggestions": [combo_suggestion_payload(s) for s in suggestions],
        }

    @app.get("/api/orders/insights")
    async def order_insights(  # noqa: PLR0913
        request: Request,
        userId: str | None = None,  # noqa: N803
        timeRange: str = "all",  # noqa: N803
        period: str = "month",
        granularity: str | None = None,
        timezone: str = "UTC",
    ) -> dict[str, object]:
        """Patterns, trends and recommendations from a user's orders."""
        state_container: AppContainer = request.app.state.container
        analytics = state_container.analytics_service
        patterns = analytics.analyze_nutrition_patterns(userId, timeRange)
        trends = analytics.track_dietary_trends(userId, period, granularity, timezone)
        recommendations = analytics.generate_personalized_recommendations(userId)
        return {
            "success": True,
            "data": {
                "patterns": patterns_payload(patterns),
                "trends": trends_payload(trends),
                "recommendations": [
                    recommendation_payload(r) for r in recommendations
                ],
            },
        }

    return app
