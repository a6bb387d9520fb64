"""
Pydantic schemas: the data contracts shared by the API, the funnel service
and the recommendation engine.

UserProfile is the quiz output handed to the engine. Product is the catalog
view the engine reads; ORM rows convert with `Product.model_validate(row)`.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# ── Enums ────────────────────────────────────────────────────────────────────


class SkinType(str, enum.Enum):
    SECCA = "secca"
    GRASSA = "grassa"
    MISTA = "mista"
    NORMALE = "normale"
    ASFITTICA = "asfittica"


class Concern(str, enum.Enum):
    ROSSORI = "rossori"
    ACNE = "acne"
    RUGHE = "rughe"
    PIGMENTAZIONE = "pigmentazione"
    PORI_DILATATI = "pori_dilatati"
    OLEOSITA = "oleosita"
    DANNI_SOLARI = "danni_solari"
    OCCHIAIE = "occhiaie"
    DISIDRATAZIONE = "disidratazione"
    ELASTICITA = "elasticita"
    TEXTURE = "texture"
    NESSUNA = "nessuna"


class Category(str, enum.Enum):
    DETERGENTE = "Detergente"
    TONICO = "Tonico"
    SIERO = "Siero"
    CONTORNO_OCCHI = "Contorno Occhi"
    CREMA_VISO = "Crema Viso"
    PROTEZIONE_SOLARE = "Protezione Solare"
    MASCHERA = "Maschera"
    CORPO = "Olio/Burro/Corpo"


FULL_ROUTINE = "routine_completa"


# ── Catalog ──────────────────────────────────────────────────────────────────


class Product(BaseModel):
    """Catalog product as seen by the recommender."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = ""
    category: str = ""
    step: Optional[str] = None
    price: float = Field(default=0.0, ge=0)
    brand: Optional[str] = None
    description_short: Optional[str] = None
    description_long: Optional[str] = None
    how_to_use: Optional[str] = None
    inci: Optional[str] = None
    product_url: str = ""
    image_url: Optional[str] = None
    key_ingredients: list[str] = Field(default_factory=list)
    concerns_treated: list[str] = Field(default_factory=list)
    skin_types: list[str] = Field(default_factory=list)
    active: bool = True

    @field_validator("key_ingredients", "concerns_treated", "skin_types", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("active", mode="before")
    @classmethod
    def _null_is_inactive(cls, value: Any) -> Any:
        return False if value is None else value


# ── Quiz profile ─────────────────────────────────────────────────────────────


class UserProfile(BaseModel):
    """Skin profile collected by the quiz wizard."""

    skin_type: Optional[SkinType] = None
    age: Optional[int] = Field(default=None, gt=0, lt=120)
    concerns: list[str] = Field(default_factory=list)
    product_type: Optional[str] = None

    @field_validator("skin_type", mode="before")
    @classmethod
    def _first_selected_skin_type(cls, value: Any) -> Any:
        # The wizard lets visitors tick several types; the first one wins.
        if isinstance(value, (list, tuple)):
            return value[0] if value else None
        return value


class SkinScores(BaseModel):
    """AI photo analysis: 1 (poor) to 10 (excellent) per parameter."""

    hydration: int = Field(ge=1, le=10, description="Idratazione 1-10")
    elasticity: int = Field(ge=1, le=10, description="Elasticità 1-10")
    pigmentation: int = Field(ge=1, le=10, description="Uniformità del tono 1-10")
    acne: int = Field(ge=1, le=10, description="Pelle pulita da imperfezioni 1-10")
    wrinkles: int = Field(ge=1, le=10, description="Levigatezza (assenza di rughe) 1-10")
    pores: int = Field(ge=1, le=10, description="Pori minimali 1-10")
    redness: int = Field(ge=1, le=10, description="Assenza di rossore 1-10")


class SkinAnalysisResult(BaseModel):
    scores: SkinScores
    is_fallback: bool = False
    suggested_concerns: list[str] = Field(default_factory=list)


# ── Funnel requests / responses ──────────────────────────────────────────────


class QuizSubmission(UserProfile):
    """Everything the wizard sends on the results step."""

    name: str = Field(min_length=1, max_length=100)
    full_name: Optional[str] = Field(default=None, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=30)
    additional_info: Optional[str] = Field(default=None, max_length=2000)
    skin_scores: Optional[SkinScores] = None

    def to_profile(self) -> UserProfile:
        return UserProfile(
            skin_type=self.skin_type,
            age=self.age,
            concerns=self.concerns,
            product_type=self.product_type,
        )


class RecommendationResponse(BaseModel):
    products: list[Product]
    message: str
    discount_code: str
    total: float
    discounted_total: float
    savings: float
    lead_id: Optional[int] = None
    notice: Optional[str] = None


class ChatTurn(BaseModel):
    role: str = Field(pattern="^(user|assistant)$")
    content: str


class QuestionsChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=2000)
    user_name: Optional[str] = None
    history: list[ChatTurn] = Field(default_factory=list)


class ProductChatRequest(QuestionsChatRequest):
    pass


class AdvisorChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=2000)
    user_name: Optional[str] = None
    profile: UserProfile = Field(default_factory=UserProfile)
    skin_scores: Optional[SkinScores] = None
    product_ids: list[str] = Field(default_factory=list)


class ChatResponse(BaseModel):
    response: str


class CartItemIn(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1, le=20)


class CartLine(BaseModel):
    product: Product
    quantity: int


class CartView(BaseModel):
    session_id: str
    items: list[CartLine] = Field(default_factory=list)
    total: float = 0.0
    product_ids: list[str] = Field(default_factory=list)
