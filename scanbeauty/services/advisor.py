"""
AdvisorService: runs the three chat advisors.

Chat history comes from the browser as plain role/content turns and is
rebuilt into pydantic-ai messages. Any model failure turns into a polite
fixed reply.
"""

import logging
from typing import Optional, Sequence

from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    TextPart,
    UserPromptPart,
)

from scanbeauty.agents.advisors import (
    ProductDeps,
    QuestionsDeps,
    ResultsDeps,
    product_agent,
    questions_agent,
    results_agent,
)
from scanbeauty.errors import log_error
from scanbeauty.schemas import ChatTurn, Product, SkinScores, UserProfile

logger = logging.getLogger(__name__)

# Maximum turns fed back as message_history
MAX_HISTORY_TURNS = 20

FALLBACK_REPLY = "Mi dispiace, in questo momento non riesco a rispondere. Riprova tra poco! 💚"


def to_message_history(turns: Sequence[ChatTurn]) -> list[ModelMessage]:
    history: list[ModelMessage] = []
    for turn in list(turns)[-MAX_HISTORY_TURNS:]:
        if not turn.content.strip():
            continue
        if turn.role == "user":
            history.append(ModelRequest(parts=[UserPromptPart(content=turn.content)]))
        elif history:
            # The conversation has to open with a user turn
            history.append(ModelResponse(parts=[TextPart(content=turn.content)]))
    return history


class AdvisorService:
    async def ask_questions(
        self,
        message: str,
        history: Sequence[ChatTurn] = (),
        user_name: Optional[str] = None,
    ) -> str:
        try:
            result = await questions_agent.run(
                message,
                deps=QuestionsDeps(user_name=user_name),
                message_history=to_message_history(history),
            )
            return result.output
        except Exception as e:
            log_error(e, "questions_advisor")
            return FALLBACK_REPLY

    async def ask_product(
        self,
        message: str,
        catalog: list[Product],
        history: Sequence[ChatTurn] = (),
        user_name: Optional[str] = None,
    ) -> str:
        try:
            result = await product_agent.run(
                message,
                deps=ProductDeps(catalog=catalog, user_name=user_name),
                message_history=to_message_history(history),
            )
            return result.output
        except Exception as e:
            log_error(e, "product_advisor")
            return FALLBACK_REPLY

    async def ask_results(
        self,
        message: str,
        profile: UserProfile,
        products: list[Product],
        skin_scores: Optional[SkinScores] = None,
        user_name: Optional[str] = None,
    ) -> str:
        try:
            result = await results_agent.run(
                message,
                deps=ResultsDeps(
                    profile=profile,
                    products=products,
                    skin_scores=skin_scores,
                    user_name=user_name,
                ),
            )
            return result.output
        except Exception as e:
            log_error(e, "results_advisor")
            return FALLBACK_REPLY
