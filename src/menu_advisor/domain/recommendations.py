"""Models for menu classification results and favorites."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RecommendationItem(BaseModel):
    """Menu item classified by the model, with its reasoning."""

    model_config = ConfigDict(extra="ignore")

    name: str
    description: str | None = None
    reason: str = ""
    url: str | None = None


class RecommendationSet(BaseModel):
    """Safe, caution and avoid buckets exactly as the model returned them."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    safe: list[RecommendationItem] = Field(default_factory=list)
    caution: list[RecommendationItem] = Field(default_factory=list)
    avoid: list[RecommendationItem] = Field(default_factory=list)
    ingredients_found: bool = False

    def is_empty(self) -> bool:
        """Return True when no bucket holds any item."""
        return not (self.safe or self.caution or self.avoid)


class FavoriteEntry(RecommendationItem):
    """A saved recommendation and the restaurant it was found at."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    restaurant_name: str

    @classmethod
    def from_item(
        cls, item: RecommendationItem, restaurant_name: str
    ) -> "FavoriteEntry":
        """Build a favorite from a recommendation."""
        return cls(**item.model_dump(), restaurant_name=restaurant_name)

    def key(self) -> tuple[str, str]:
        """Return the (item name, restaurant name) identity."""
        return self.name, self.restaurant_name
