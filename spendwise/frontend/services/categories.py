from __future__ import annotations

from spendwise.core.data_models import CategoriesResponse, Category, CategoryInput, MessageResponse
from spendwise.core.gateway import GatewayClient

CATEGORIES_KEY = ("categories",)


class CategoryService:
    def __init__(self, client: GatewayClient):
        self.client = client

    async def get_categories(self) -> CategoriesResponse:
        payload = await self.client.get("/categories")
        return CategoriesResponse.model_validate(payload)

    async def create_category(self, data: CategoryInput) -> Category:
        payload = await self.client.post("/categories", {"category": data.model_dump(exclude_none=True)})
        return Category.model_validate(payload.get("category", payload))

    async def update_category(self, category_id: int, data: CategoryInput) -> Category:
        payload = await self.client.put(
            f"/categories/{category_id}",
            {"category": data.model_dump(exclude_unset=True)},
        )
        return Category.model_validate(payload.get("category", payload))

    async def delete_category(self, category_id: int) -> MessageResponse:
        payload = await self.client.delete(f"/categories/{category_id}")
        return MessageResponse.model_validate(payload)
