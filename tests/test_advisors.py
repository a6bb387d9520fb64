"""
Unit tests for the chat advisors: prompts are checked through the messages
a FunctionModel receives; model failures must turn into the fixed reply.
"""

import pytest
from pydantic_ai.messages import ModelRequest, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from scanbeauty.agents.advisors import product_agent, questions_agent, results_agent
from scanbeauty.schemas import ChatTurn, Product, SkinScores, SkinType, UserProfile
from scanbeauty.services.advisor import (
    FALLBACK_REPLY,
    MAX_HISTORY_TURNS,
    AdvisorService,
    to_message_history,
)


def _reply(text: str):
    def mock_model(messages, info: AgentInfo):
        return ModelResponse(parts=[TextPart(content=text)])

    return mock_model


def _capturing(captured: list, text: str = "Ecco la risposta 💚"):
    def mock_model(messages, info: AgentInfo):
        captured.extend(messages)
        return ModelResponse(parts=[TextPart(content=text)])

    return mock_model


def _failing(messages, info: AgentInfo):
    raise RuntimeError("model down")


def _serum() -> Product:
    return Product(
        id="s1",
        name="Siero Vitamina C",
        category="Siero",
        price=32.0,
        description_short="Illumina e uniforma",
        concerns_treated=["Macchie e discromie"],
    )


class TestMessageHistory:
    def test_leading_assistant_turns_dropped(self):
        turns = [
            ChatTurn(role="assistant", content="Ciao! Come posso aiutarti?"),
            ChatTurn(role="user", content="Che siero mi consigli?"),
            ChatTurn(role="assistant", content="Dipende dalla tua pelle."),
        ]
        history = to_message_history(turns)
        assert [type(m) for m in history] == [ModelRequest, ModelResponse]

    def test_blank_turns_skipped(self):
        turns = [ChatTurn(role="user", content="   "), ChatTurn(role="user", content="Ciao")]
        assert len(to_message_history(turns)) == 1

    def test_history_is_capped(self):
        turns = [ChatTurn(role="user", content=f"domanda {i}") for i in range(MAX_HISTORY_TURNS + 5)]
        history = to_message_history(turns)
        assert len(history) == MAX_HISTORY_TURNS
        assert "domanda 5" in str(history[0])


class TestQuestionsAdvisor:
    @pytest.mark.anyio
    async def test_reply_and_prompt(self):
        captured = []
        with questions_agent.override(model=FunctionModel(_capturing(captured, "Usa la crema ogni sera"))):
            reply = await AdvisorService().ask_questions(
                "Come applico la crema?",
                history=[ChatTurn(role="user", content="Ho la pelle secca")],
                user_name="Giulia",
            )

        assert reply == "Usa la crema ogni sera"
        prompt = str(captured)
        assert "Giulia" in prompt
        assert "Ho la pelle secca" in prompt

    @pytest.mark.anyio
    async def test_failure_returns_fallback(self):
        with questions_agent.override(model=FunctionModel(_failing)):
            reply = await AdvisorService().ask_questions("Ciao")
        assert reply == FALLBACK_REPLY


class TestProductAdvisor:
    @pytest.mark.anyio
    async def test_catalog_in_prompt(self):
        captured = []
        with product_agent.override(model=FunctionModel(_capturing(captured))):
            await AdvisorService().ask_product("Avete qualcosa per le macchie?", [_serum()])

        prompt = str(captured)
        assert "CATALOGO PRODOTTI" in prompt
        assert "Siero Vitamina C" in prompt

    @pytest.mark.anyio
    async def test_empty_catalog_is_stated(self):
        captured = []
        with product_agent.override(model=FunctionModel(_capturing(captured))):
            await AdvisorService().ask_product("Cosa vendete?", [])
        assert "catalogo non disponibile" in str(captured)

    @pytest.mark.anyio
    async def test_failure_returns_fallback(self):
        with product_agent.override(model=FunctionModel(_failing)):
            assert await AdvisorService().ask_product("Ciao", [_serum()]) == FALLBACK_REPLY


class TestResultsAdvisor:
    @pytest.mark.anyio
    async def test_profile_scores_and_products_in_prompt(self):
        captured = []
        profile = UserProfile(skin_type=SkinType.MISTA, age=41, concerns=["pigmentazione"])
        scores = SkinScores(hydration=5, elasticity=6, pigmentation=3, acne=8, wrinkles=6, pores=5, redness=9)

        with results_agent.override(model=FunctionModel(_capturing(captured))):
            reply = await AdvisorService().ask_results(
                "Quando vedrò i risultati?", profile, [_serum()], scores, user_name="Marta"
            )

        assert reply == "Ecco la risposta 💚"
        prompt = str(captured)
        assert "PROFILO CLIENTE" in prompt
        assert "mista" in prompt
        assert "pigmentation: 3/10" in prompt
        assert "Siero Vitamina C" in prompt

    @pytest.mark.anyio
    async def test_without_scores(self):
        captured = []
        with results_agent.override(model=FunctionModel(_capturing(captured))):
            await AdvisorService().ask_results("Come uso il siero?", UserProfile(), [_serum()])
        assert "Non disponibile" in str(captured)

    @pytest.mark.anyio
    async def test_failure_returns_fallback(self):
        with results_agent.override(model=FunctionModel(_failing)):
            reply = await AdvisorService().ask_results("Ciao", UserProfile(), [])
        assert reply == FALLBACK_REPLY
