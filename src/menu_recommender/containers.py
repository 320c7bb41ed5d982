"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from menu_recommender.adapters.openai_criteria_client import OpenAICriteriaClient
from menu_recommender.adapters.supabase_catalog_repository import (
    SupabaseCatalogRepository,
)
from menu_recommender.adapters.supabase_combo_repository import (
    SupabaseComboRepository,
)
from menu_recommender.adapters.supabase_order_repository import (
    SupabaseOrderRepository,
)
from menu_recommender.config import Settings
from menu_recommender.services.analytics import OrderAnalyticsService
from menu_recommender.services.cache import InMemoryCache
from menu_recommender.services.combos import ComboService
from menu_recommender.services.criteria import CriteriaResolver
from menu_recommender.services.ingredients import IngredientRecommendationService
from menu_recommender.services.recommendations import RecommendationService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    criteria_resolver: CriteriaResolver
    recommendation_service: RecommendationService
    ingredient_service: IngredientRecommendationService
    combo_service: ComboService
    analytics_service: OrderAnalyticsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    catalog_repository = SupabaseCatalogRepository(supabase_client)
    combo_repository = SupabaseComboRepository(supabase_client)
    order_repository = SupabaseOrderRepository(supabase_client)

    language_client = (
        OpenAICriteriaClient.create(resolved_settings.openai_api_key)
        if resolved_settings.openai_api_key
        else None
    )
    criteria_resolver = CriteriaResolver(
        client=language_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        timeout_seconds=resolved_settings.criteria_timeout_seconds,
        cache=InMemoryCache(),
        cache_ttl_seconds=resolved_settings.criteria_cache_ttl_seconds,
    )
    recommendation_service = RecommendationService(
        resolver=criteria_resolver, catalog=catalog_repository
    )
    ingredient_service = IngredientRecommendationService(
        catalog=catalog_repository,
        default_limit=resolved_settings.default_page_limit,
        max_limit=resolved_settings.max_page_limit,
    )
    combo_service = ComboService(combos=combo_repository, catalog=catalog_repository)
    analytics_service = OrderAnalyticsService(order_repository)

    async def close_resources() -> None:
        if language_client is not None:
            await language_client.close()

    return AppContainer(
        settings=resolved_settings,
        criteria_resolver=criteria_resolver,
        recommendation_service=recommendation_service,
        ingredient_service=ingredient_service,
        combo_service=combo_service,
        analytics_service=analytics_service,
        close_resources=close_resources,
    )
