"""
Skin Analysis Agent: scores a face photo on seven parameters.

Takes the photo as binary content, returns structured SkinScores (1-10,
higher is healthier).
"""

import os

from pydantic_ai import Agent

from scanbeauty.config import get_settings
from scanbeauty.schemas import SkinScores

settings = get_settings()
if settings.claude_api_key and not os.environ.get("ANTHROPIC_API_KEY"):
    os.environ["ANTHROPIC_API_KEY"] = settings.claude_api_key

SKIN_ANALYSIS_PROMPT = """Analizza questa foto del viso come dermatologo esperto e valuta la salute della pelle su questi aspetti:
- IDRATAZIONE (hydration): 1-3 molto secca, 4-6 normale, 7-10 ben idratata
- ELASTICITÀ (elasticity): 1-3 flaccida, 4-6 moderata, 7-10 tonica
- PIGMENTAZIONE (pigmentation): 1-3 molte macchie, 4-6 alcune discromie, 7-10 tono uniforme
- ACNE (acne): 1-3 severa, 4-6 moderata, 7-10 pelle pulita
- RUGHE (wrinkles): 1-3 profonde, 4-6 linee sottili, 7-10 pelle liscia
- PORI (pores): 1-3 molto dilatati, 4-6 visibili, 7-10 minimali
- ROSSORE (redness): 1-3 diffuso, 4-6 leggero, 7-10 nessuno

Rispondi solo con i sette punteggi interi da 1 a 10."""

skin_analysis_agent = Agent(
    settings.analysis_model,
    output_type=SkinScores,
    system_prompt=SKIN_ANALYSIS_PROMPT,
    defer_model_check=True,
)
