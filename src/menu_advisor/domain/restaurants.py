"""Restaurant and menu models returned by lookups."""

from pydantic import BaseModel, Field


class Restaurant(BaseModel):
    """A restaurant resolved by the model."""

    name: str = Field(min_length=1)
    address: str | None = None
    website: str | None = None


class MenuItem(BaseModel):
    """Single menu item."""

    name: str
    description: str | None = None


class MenuCategory(BaseModel):
    """Menu section with its items in menu order."""

    category: str = ""
    items: list[MenuItem] = Field(default_factory=list)


MenuSnapshot = list[MenuCategory]


class RestaurantLookup(BaseModel):
    """Result of a restaurant-and-menu lookup."""

    restaurant: Restaurant
    menu: MenuSnapshot = Field(default_factory=list)
