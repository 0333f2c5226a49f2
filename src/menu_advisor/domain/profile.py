"""Dietary profile models."""

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

# Canonical order for restriction strings and flag toggles.
RESTRICTION_FLAGS: tuple[tuple[str, str], ...] = (
    ("gluten_free", "Gluten-Free"),
    ("dairy_free", "Dairy-Free"),
    ("vegan", "Vegan"),
    ("vegetarian", "Vegetarian"),
    ("low_sodium", "Low-Sodium"),
    ("keto", "Keto"),
    ("diabetic", "Diabetic"),
    ("gastroparesis", "Gastroparesis"),
)

ALLERGY_OPTIONS: tuple[str, ...] = (
    "Peanuts",
    "Tree Nuts",
    "Shellfish",
    "Fish",
    "Soy",
    "Wheat",
    "Eggs",
    "Milk",
)

_FLAG_NAMES = frozenset(name for name, _ in RESTRICTION_FLAGS)


class DietaryProfile(BaseModel):
    """Active restrictions and allergies for the current user.

    Persisted records use the camelCase keys of the mobile app
    (``glutenFree``); snake_case names are accepted too and unknown keys are
    ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    gluten_free: bool = False
    dairy_free: bool = False
    vegan: bool = False
    vegetarian: bool = False
    low_sodium: bool = False
    keto: bool = False
    diabetic: bool = False
    gastroparesis: bool = False
    allergies: tuple[str, ...] = ()
    other: str = ""

    @field_validator("allergies", mode="before")
    @classmethod
    def _dedupe_allergies(cls, value: object) -> object:
        if isinstance(value, list | tuple):
            return tuple(dict.fromkeys(str(item) for item in value))
        return value

    def toggle_flag(self, flag: str) -> "DietaryProfile":
        """Return a copy with the named restriction flag flipped."""
        if flag not in _FLAG_NAMES:
            raise ValueError(f"Unknown restriction flag: {flag}")
        return self.model_copy(update={flag: not getattr(self, flag)})

    def toggle_allergy(self, allergy: str) -> "DietaryProfile":
        """Return a copy with the allergy added, or removed if present."""
        if allergy in self.allergies:
            allergies = tuple(item for item in self.allergies if item != allergy)
        else:
            allergies = (*self.allergies, allergy)
        return self.model_copy(update={"allergies": allergies})

    def with_other(self, text: str) -> "DietaryProfile":
        """Return a copy with the free-text note replaced."""
        return self.model_copy(update={"other": text})

    def active_labels(self) -> list[str]:
        """Return display labels of the set flags in canonical order."""
        return [label for name, label in RESTRICTION_FLAGS if getattr(self, name)]


def restriction_string(profile: DietaryProfile) -> str:
    """Summarize a profile as a comma-joined string for model prompts."""
    tokens = profile.active_labels()
    tokens.extend(profile.allergies)
    if profile.other.strip():
        tokens.append(profile.other.strip())
    return ", ".join(tokens)
