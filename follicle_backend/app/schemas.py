# schemas.py  (hair attributes, interaction vocabulary, API request bodies)

from __future__ import annotations
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, confloat, conint, ConfigDict


# ===================== Hair attributes =====================

class HairType(str, Enum):
    STRAIGHT = "straight"
    WAVY = "wavy"
    CURLY = "curly"
    COILY = "coily"
    PROTECTIVE = "protective"   # braids, locs, twists

class Porosity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class Density(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class Thickness(str, Enum):
    FINE = "fine"
    MEDIUM = "medium"
    COARSE = "coarse"

class Damage(str, Enum):
    NONE = "none"
    SOME = "some"
    SEVERE = "severe"


# ===================== Catalog vocabulary =====================

class ProductCategory(str, Enum):
    SHAMPOOS = "Shampoos"
    CONDITIONERS = "Conditioners"
    HAIR_MASKS = "Hair Masks"
    LEAVE_IN_TREATMENTS = "Leave-in Treatments"
    SCALP_TREATMENTS = "Scalp Treatments"
    LEAVE_IN_CONDITIONERS = "Leave-in Conditioners"
    HAIR_OILS = "Hair Oils"
    HAIR_SERUMS = "Hair Serums"
    DETANGLERS = "Detanglers"
    STYLING_CREAMS_SPRAYS = "Styling Creams & Sprays"
    GEL_POMADE_WAX = "Gel, Pomade & Wax"
    MOUSSE_FOAM = "Mousse & Foam"
    HAIR_SPRAYS = "Hair Sprays"
    HEAT_PROTECTANTS = "Heat Protectants"
    DRY_SHAMPOOS = "Dry Shampoos"
    SCALP_SCRUBS = "Scalp Scrubs"
    STYLING_TOOLS = "Styling Tools"
    OTHER_HAIR_CLEANSERS = "Other Hair Cleansers"
    HAIR_LOSS = "Hair Loss"
    OTHER_HAIRCARE = "Other Haircare"
    OTHER_STYLING = "Other Styling"

class FrequencyUnit(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


# ===================== Interactions =====================

class EntityKind(str, Enum):
    PRODUCT = "product"
    ROUTINE = "routine"
    INGREDIENT = "ingredient"

class InteractionType(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    SAVE = "save"
    VIEW = "view"
    ROUTINE_ADD = "routine"     # product added to one of the actor's routines
    REROLL = "reroll"
    ADAPT = "adapt"
    AVOID = "avoid"
    ALLERGIC = "allergic"

ALLOWED_INTERACTIONS: Dict[EntityKind, frozenset] = {
    EntityKind.PRODUCT: frozenset({
        InteractionType.LIKE, InteractionType.DISLIKE, InteractionType.SAVE,
        InteractionType.VIEW, InteractionType.ROUTINE_ADD, InteractionType.REROLL,
    }),
    EntityKind.ROUTINE: frozenset({
        InteractionType.LIKE, InteractionType.DISLIKE, InteractionType.SAVE,
        InteractionType.VIEW, InteractionType.ADAPT,
    }),
    EntityKind.INGREDIENT: frozenset({
        InteractionType.LIKE, InteractionType.DISLIKE, InteractionType.AVOID,
        InteractionType.ALLERGIC, InteractionType.VIEW,
    }),
}

# Entity kinds that carry a match score.
SCORED_KINDS = (EntityKind.PRODUCT, EntityKind.ROUTINE)


# ===================== Scoring signals =====================

class SimilarityTier(str, Enum):
    EXACT = "exact"
    VERY_HIGH = "very_high"
    HIGH = "high"
    MEDIUM = "medium"

class DataQuality(str, Enum):
    OK = "ok"
    NO_INGREDIENT_DATA = "no_ingredient_data"
    INVALID_PROFILE_CODE = "invalid_profile_code"
    COLD_START = "cold_start"                 # no interaction events at all
    NO_SIMILAR_ACTORS = "no_similar_actors"   # events exist, none similar enough
    NO_VIEWS = "no_views"                     # no rate denominator
    NO_SCORED_STEPS = "no_scored_steps"
    ERROR = "error"


# ===================== Request bodies =====================

class HairAnalysisIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    hair_type: HairType
    porosity: Porosity
    density: Density
    thickness: Thickness
    damage: Damage
    budget: Optional[confloat(ge=0)] = None     # max product price the user accepts

class SimilarityRequest(BaseModel):
    code_a: str = Field(..., min_length=1)
    code_b: str = Field(..., min_length=1)

class PreviewRequest(BaseModel):
    profile_code: str = Field(..., min_length=1)
    kind: EntityKind = EntityKind.PRODUCT
    category: Optional[ProductCategory] = None
    max_price: Optional[confloat(ge=0)] = None
    limit: Optional[conint(ge=1, le=500)] = 20

class RescoreSummaryOut(BaseModel):
    model_config = ConfigDict(extra="allow")

    user_id: str
    kind: EntityKind
    generation_id: Optional[int] = None
    scored: int = 0
    written: int = 0
    verified: Optional[int] = None
    skipped_reason: Optional[str] = None
    batches: List[int] = Field(default_factory=list)
