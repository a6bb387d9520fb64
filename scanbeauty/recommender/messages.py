"""Personalised summary shown above the recommended products."""

from typing import Optional

from scanbeauty.recommender import rules
from scanbeauty.schemas import UserProfile

CONCERN_LABELS = {
    "rossori": "rossori",
    "acne": "acne",
    "rughe": "rughe",
    "pigmentazione": "macchie e discromie",
    "pori_dilatati": "pori dilatati",
    "oleosita": "eccesso di sebo",
    "danni_solari": "danni solari",
    "occhiaie": "occhiaie",
    "disidratazione": "disidratazione",
    "elasticita": "perdita di tono",
    "texture": "texture irregolare",
}

# Labels already covered by the headline of each message
_HEADLINE_CONCERNS = {"rossori", "acne"}


def age_bracket(age: Optional[int]) -> Optional[str]:
    if age is None:
        return None
    if age <= 25:
        return "16-25 anni"
    if age <= 35:
        return "26-35 anni"
    if age <= 45:
        return "36-45 anni"
    if age <= 60:
        return "46-60 anni"
    return "over 60"


def _headline(profile: UserProfile, skin: str, anti_aging_age: int) -> str:
    concerns = rules.effective_concerns(profile.concerns)
    if rules.has_rosacea(concerns):
        return (
            "🌸 Ho identificato che la tua pelle potrebbe soffrire di rosacea (acne + rossori). "
            "Ti consiglio una routine delicata e lenitiva specifica per questa condizione sensibile."
        )
    if rules.has_acne(concerns):
        return (
            "✨ La tua pelle ha tendenza acneica. Ti ho selezionato prodotti sebo-regolatori e "
            "purificanti che combattono le imperfezioni senza aggredire la pelle."
        )
    if rules.has_sensitive_skin(concerns):
        return (
            "💚 La tua pelle sensibile ha bisogno di delicatezza! Ti consiglio prodotti lenitivi "
            "e calmanti per ridurre rossori e irritazioni."
        )
    if rules.has_anti_aging(concerns, profile.age, anti_aging_age):
        return (
            "⏰ Ho selezionato per te una routine anti-età con acido ialuronico, collagene e "
            "attivi rimpolpanti per contrastare rughe e segni del tempo."
        )
    if rules.has_pigmentation(concerns):
        return (
            "☀️ Per le tue macchie e discromie, ti consiglio prodotti con azione schiarente "
            "specifica a base di acidi per uniformare il tono della pelle."
        )
    return (
        f"💫 Ho selezionato i prodotti perfetti per la tua pelle {skin}, "
        "seguendo l'ordine corretto della skincare routine!"
    )


def get_personalized_message(profile: UserProfile, anti_aging_age: int = rules.ANTI_AGING_AGE) -> str:
    skin = profile.skin_type.value if profile.skin_type else "unica"
    parts = [_headline(profile, skin, anti_aging_age)]

    bracket = age_bracket(profile.age)
    if profile.skin_type and bracket:
        parts.append(f"Profilo: pelle {skin}, {bracket}.")
    elif profile.skin_type:
        parts.append(f"Profilo: pelle {skin}.")
    elif bracket:
        parts.append(f"Profilo: {bracket}.")

    concerns = rules.effective_concerns(profile.concerns)
    extra = [
        CONCERN_LABELS[c]
        for c in sorted(concerns)
        if c in CONCERN_LABELS and c not in _HEADLINE_CONCERNS
    ]
    if extra:
        parts.append(f"Ho tenuto conto anche di: {', '.join(extra)}.")

    return " ".join(parts)
