"""Shared test fixtures."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

import pytest

from menu_recommender.config import Settings
from menu_recommender.containers import AppContainer
from menu_recommender.domain.catalog import CatalogItem
from menu_recommender.domain.combos import ComboFrequency
from menu_recommender.domain.orders import OrderRecord
from menu_recommender.domain.predicates import Predicate, matches
from menu_recommender.services.analytics import OrderAnalyticsService, OrderRepository
from menu_recommender.services.cache import InMemoryCache
from menu_recommender.services.catalog import CatalogRepository
from menu_recommender.services.combos import ComboRepository, ComboService
from menu_recommender.services.criteria import CriteriaResolver, LanguageClient
from menu_recommender.services.ingredients import IngredientRecommendationService
from menu_recommender.services.nutrition import to_plain_record
from menu_recommender.services.recommendations import RecommendationService


def make_item(number: int, **fields: object) -> CatalogItem:
    """Build a catalog item with a predictable id."""
    values: dict[str, object] = {
        "id": UUID(int=number),
        "vendor": "Testburger",
        "item_name": f"Item {number}",
    }
    values.update(fields)
    return CatalogItem(**values)


@dataclass
class InMemoryCatalogRepository(CatalogRepository):
    """In-memory catalog evaluated with the predicate interpreter."""

    items: list[CatalogItem] = field(default_factory=list)
    queries: list[Predicate] = field(default_factory=list)

    def find_items(self, predicate: Predicate) -> list[CatalogItem]:
        self.queries.append(predicate)
        selected = [
            item for item in self.items if matches(predicate, to_plain_record(item))
        ]
        return sorted(selected, key=lambda item: str(item.id))

    def get_item(self, item_id: UUID) -> CatalogItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    def get_items(self, item_ids: list[UUID]) -> list[CatalogItem]:
        wanted = set(item_ids)
        return [item for item in self.items if item.id in wanted]

    def list_by_vendor(
        self, vendor: str, exclude_id: UUID, limit: int
    ) -> list[CatalogItem]:
        same_vendor = [
            item
            for item in self.items
            if item.vendor == vendor and item.id != exclude_id
        ]
        return same_vendor[:limit]


@dataclass
class InMemoryComboRepository(ComboRepository):
    """In-memory combo counters."""

    rows: list[ComboFrequency] = field(default_factory=list)
    fail_popularity: bool = False

    def list_for_main_item(
        self, main_item_id: UUID, limit: int
    ) -> list[ComboFrequency]:
        matching = [row for row in self.rows if row.main_item_id == main_item_id]
        return sorted(matching, key=lambda row: row.popularity, reverse=True)[:limit]

    def increment(
        self, main_item_id: UUID, complementary_item_id: UUID, amount: int
    ) -> ComboFrequency:
        existing = self._find(main_item_id, complementary_item_id)
        updated = ComboFrequency(
            main_item_id=main_item_id,
            complementary_item_id=complementary_item_id,
            frequency=(existing.frequency if existing else 0) + amount,
            popularity=existing.popularity if existing else 0,
        )
        self._replace(existing, updated)
        return updated

    def set_popularity(
        self, main_item_id: UUID, complementary_item_id: UUID, popularity: int
    ) -> None:
        if self.fail_popularity:
            raise RuntimeError("update failed")
        existing = self._find(main_item_id, complementary_item_id)
        if existing is None:
            return
        self._replace(
            existing,
            ComboFrequency(
                main_item_id=main_item_id,
                complementary_item_id=complementary_item_id,
                frequency=existing.frequency,
                popularity=popularity,
            ),
        )

    def _find(
        self, main_item_id: UUID, complementary_item_id: UUID
    ) -> ComboFrequency | None:
        return next(
            (
                row
                for row in self.rows
                if row.main_item_id == main_item_id
                and row.complementary_item_id == complementary_item_id
            ),
            None,
        )

    def _replace(
        self, existing: ComboFrequency | None, updated: ComboFrequency
    ) -> None:
        if existing is not None:
            self.rows.remove(existing)
        self.rows.append(updated)


@dataclass
class InMemoryOrderRepository(OrderRepository):
    """In-memory order history that records the filters it was asked for."""

    orders: list[OrderRecord] = field(default_factory=list)
    calls: list[tuple[UUID, datetime | None, str | None]] = field(
        default_factory=list
    )

    def list_orders(
        self, user_id: UUID, since: datetime | None, status: str | None
    ) -> list[OrderRecord]:
        self.calls.append((user_id, since, status))
        return [order for order in self.orders if order.user_id == user_id]


@dataclass
class FakeLanguageClient(LanguageClient):
    """Fake language client returning a fixed payload or failing."""

    payload: object = field(default_factory=dict)
    error: Exception | None = None
    delay_seconds: float = 0.0
    prompts: list[str] = field(default_factory=list)

    async def parse(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        self.prompts.append(prompt)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.payload  # type: ignore[return-value]


@pytest.fixture(autouse=True)
def _propagate_app_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(logging.getLogger("menu_recommender"), "propagate", True)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        openai_api_key="openai-key",
    )


@pytest.fixture
def catalog() -> InMemoryCatalogRepository:
    return InMemoryCatalogRepository()


@pytest.fixture
def language_client() -> FakeLanguageClient:
    return FakeLanguageClient()


@pytest.fixture
def container(
    settings: Settings,
    catalog: InMemoryCatalogRepository,
    language_client: FakeLanguageClient,
) -> AppContainer:
    resolver = CriteriaResolver(
        client=language_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
        timeout_seconds=settings.criteria_timeout_seconds,
        cache=InMemoryCache(),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        criteria_resolver=resolver,
        recommendation_service=RecommendationService(
            resolver=resolver, catalog=catalog
        ),
        ingredient_service=IngredientRecommendationService(
            catalog=catalog,
            default_limit=settings.default_page_limit,
            max_limit=settings.max_page_limit,
        ),
        combo_service=ComboService(combos=InMemoryComboRepository(), catalog=catalog),
        analytics_service=OrderAnalyticsService(InMemoryOrderRepository()),
        close_resources=close_resources,
    )
