"""
Chat advisor agents: informational only, never part of the recommendation.

questions_agent: general skincare Q&A
product_agent: questions about the catalog
results_agent: post-results advisor that knows the profile and the picks
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from pydantic_ai import Agent, RunContext

from scanbeauty.config import get_settings
from scanbeauty.schemas import Product, SkinScores, UserProfile

settings = get_settings()
if settings.claude_api_key and not os.environ.get("ANTHROPIC_API_KEY"):
    os.environ["ANTHROPIC_API_KEY"] = settings.claude_api_key


@dataclass
class QuestionsDeps:
    user_name: Optional[str] = None
    brand_name: str = settings.brand_name


@dataclass
class ProductDeps:
    catalog: list[Product] = field(default_factory=list)
    user_name: Optional[str] = None
    brand_name: str = settings.brand_name


@dataclass
class ResultsDeps:
    profile: UserProfile
    products: list[Product] = field(default_factory=list)
    skin_scores: Optional[SkinScores] = None
    user_name: Optional[str] = None
    brand_name: str = settings.brand_name


questions_agent = Agent(
    settings.advisor_model,
    deps_type=QuestionsDeps,
    output_type=str,
    defer_model_check=True,
)

product_agent = Agent(
    settings.advisor_model,
    deps_type=ProductDeps,
    output_type=str,
    defer_model_check=True,
)

results_agent = Agent(
    settings.advisor_model,
    deps_type=ResultsDeps,
    output_type=str,
    defer_model_check=True,
)


# ── Prompt helpers ──────────────────────────────────────────────────────────


def _greeting_name(name: Optional[str]) -> str:
    return name.strip() if name and name.strip() else "la cliente"


def _format_catalog(products: list[Product]) -> str:
    if not products:
        return "  (catalogo non disponibile)"
    lines = []
    for p in products:
        line = f"  - {p.name} ({p.category}, €{p.price:.2f})"
        if p.description_short:
            line += f": {p.description_short}"
        if p.concerns_treated:
            line += f" (tratta: {', '.join(p.concerns_treated)})"
        lines.append(line)
    return "\n".join(lines)


def _format_profile(profile: UserProfile) -> str:
    lines = [
        f"Tipo di pelle: {profile.skin_type.value if profile.skin_type else 'non indicato'}",
        f"Età: {f'{profile.age} anni' if profile.age else 'non indicata'}",
        f"Problematiche: {', '.join(profile.concerns) if profile.concerns else 'nessuna indicata'}",
    ]
    return "\n".join(f"  - {line}" for line in lines)


def _format_scores(scores: Optional[SkinScores]) -> str:
    if scores is None:
        return "  Non disponibile"
    return "\n".join(f"  - {key}: {value}/10" for key, value in scores.model_dump().items())


STYLE_RULES = """STILE:
- Rispondi in italiano, in modo amichevole e personalizzato, come un'amica esperta di bellezza 💚
- Usa le emoticon con naturalezza, senza esagerare
- Risposte tra 100 e 200 parole
- Non menzionare mai competitor o altri brand
- Per problemi cutanei seri consiglia sempre un dermatologo"""


# ── Dynamic system prompts ──────────────────────────────────────────────────


@questions_agent.system_prompt
async def build_questions_prompt(ctx: RunContext[QuestionsDeps]) -> str:
    deps = ctx.deps
    return f"""Sei un'esperta consulente di bellezza e skincare per {deps.brand_name}, un brand italiano di cosmetica naturale.
Stai parlando con {_greeting_name(deps.user_name)}.

Rispondi a domande generali su cura della pelle, ingredienti e routine beauty.
Spiega in modo semplice e pratico; se la domanda riguarda un prodotto, suggerisci di fare il quiz per una routine personalizzata.

{STYLE_RULES}"""


@product_agent.system_prompt
async def build_product_prompt(ctx: RunContext[ProductDeps]) -> str:
    deps = ctx.deps
    return f"""Sei un'esperta consulente di bellezza AI per {deps.brand_name}, un brand italiano di cosmetica naturale.
Stai parlando con {_greeting_name(deps.user_name)}.

CATALOGO PRODOTTI:
{_format_catalog(deps.catalog)}

ISTRUZIONI:
- Consiglia solo prodotti presenti nel catalogo, con il loro nome completo
- Spiega per quale tipo di pelle e problematica è pensato ogni prodotto
- Se nessun prodotto è adatto, dillo con sincerità

{STYLE_RULES}"""


@results_agent.system_prompt
async def build_results_prompt(ctx: RunContext[ResultsDeps]) -> str:
    deps = ctx.deps
    return f"""Sei un esperto consulente di bellezza per {deps.brand_name}, un brand di cosmetici naturali italiani di lusso.
Stai parlando con {_greeting_name(deps.user_name)}, che ha appena ricevuto la sua routine personalizzata.

PROFILO CLIENTE:
{_format_profile(deps.profile)}

ANALISI PELLE (punteggi da 1 a 10):
{_format_scores(deps.skin_scores)}

PRODOTTI RACCOMANDATI:
{_format_catalog(deps.products)}

ISTRUZIONI:
- Se chiede perché un prodotto è adatto, spiegalo in modo specifico in base al profilo e all'analisi
- Se chiede come usare i prodotti, dai una routine passo-passo con mattina/sera e quantità
- Se chiede quando vedrà i risultati, dai tempistiche realistiche (primi risultati dopo 2 settimane, miglioramento visibile dopo 4-6)
- Se chiede combinazioni, spiega quali prodotti usare insieme e quali alternare

{STYLE_RULES}"""
