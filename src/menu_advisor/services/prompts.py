"""Prompt templates for the grounded model calls."""

import json

from menu_advisor.domain.restaurants import MenuSnapshot

GASTROPARESIS_CONTEXT = """
A key restriction is Gastroparesis (GP). You MUST verify ingredients via search.
Safe proteins: skinless chicken/turkey breast, white fish, eggs.
Avoid: beef, pork, bacon, dark meat, whole grains, nuts, seeds, raw vegetables
and fruit skins.
Caution: high fat (fried, cream, butter).
""".strip()

DIABETIC_CONTEXT = """
A key restriction is diabetes. Favor dishes low in refined carbohydrates and
added sugar, with lean protein and non-starchy vegetables.
Avoid: sugary drinks and sauces, desserts, large portions of white rice, pasta,
bread or fries.
Caution: breaded items, sweet glazes and dressings, starchy sides.
""".strip()

_RECOMMENDATION_SHAPE = """
Return a JSON object with:
safe: array of items {name, description, reason, url}.
caution: array of items {name, description, reason, url}.
avoid: array of items {name, description, reason, url}.
ingredientsFound: boolean (true if you found ingredient info via search).
""".strip()


def reverse_geocode_prompt(lat: float, lng: float) -> str:
    """Ask for a "City, State" string for coordinates."""
    return (
        'Convert these coordinates to a "City, State" string. '
        f"Reply with that string only: {lat}, {lng}"
    )


def restaurant_lookup_prompt(name: str, location: str) -> str:
    """Ask for a restaurant and its menu."""
    return (
        f'Use web search to find the specific restaurant "{name}" in "{location}".\n'
        "Return a JSON object with:\n"
        "restaurant: {name, address, website}\n"
        "menu: array of categories {category, items}, each item {name, description}."
    )


def nearby_search_prompt(location: str, radius_miles: float, restrictions: str) -> str:
    """Ask for restaurants near a location that suit the restrictions."""
    suitability = (
        f" that are likely to have options for these restrictions: {restrictions}"
        if restrictions
        else ""
    )
    return (
        f'Use web search to find restaurants within {radius_miles:g} miles of "{location}"'
        f"{suitability}.\n"
        "Return a JSON array of restaurants {name, address, website}."
    )


def classification_prompt(
    restaurant_name: str,
    restrictions: str,
    guidance: list[str],
    menu: MenuSnapshot | None,
) -> str:
    """Ask for a safe/caution/avoid classification of a menu.

    Without ``menu`` the prompt refers to the attached photo instead.
    """
    lines = [
        f'Analyze the menu for "{restaurant_name}" against these restrictions: '
        f"{restrictions or 'none specified'}.",
        *guidance,
        "Verify ingredients via web search.",
        _RECOMMENDATION_SHAPE,
    ]
    if menu is None:
        lines.append("The menu is in the attached photo. Read every legible item.")
    else:
        menu_json = json.dumps(
            [category.model_dump(mode="json") for category in menu],
            ensure_ascii=False,
        )
        lines.append(f"Menu JSON: {menu_json}")
    return "\n".join(lines)
