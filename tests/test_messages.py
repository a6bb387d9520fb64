"""Unit tests for the personalised results message."""

import pytest

from scanbeauty.recommender.messages import age_bracket, get_personalized_message
from scanbeauty.schemas import SkinType, UserProfile


class TestHeadline:
    def test_rosacea_wins_over_acne(self):
        message = get_personalized_message(UserProfile(concerns=["acne", "rossori"]))
        assert message.startswith("🌸")
        assert "rosacea" in message

    def test_acne(self):
        message = get_personalized_message(UserProfile(skin_type=SkinType.GRASSA, concerns=["acne"]))
        assert message.startswith("✨ La tua pelle ha tendenza acneica")

    def test_sensitive(self):
        assert get_personalized_message(UserProfile(concerns=["rossori"])).startswith("💚")

    def test_anti_aging_by_age(self):
        assert get_personalized_message(UserProfile(age=50)).startswith("⏰")

    def test_anti_aging_threshold_is_configurable(self):
        profile = UserProfile(skin_type=SkinType.NORMALE, age=32)
        assert get_personalized_message(profile).startswith("💫")
        assert get_personalized_message(profile, anti_aging_age=30).startswith("⏰")

    def test_pigmentation(self):
        message = get_personalized_message(UserProfile(age=25, concerns=["pigmentazione"]))
        assert "Per le tue macchie e discromie" in message

    def test_default_mentions_skin_type(self):
        message = get_personalized_message(UserProfile(skin_type=SkinType.MISTA, age=28))
        assert message.startswith("💫")
        assert "pelle mista" in message


class TestProfileLine:
    def test_skin_and_age(self):
        message = get_personalized_message(UserProfile(skin_type=SkinType.GRASSA, age=30, concerns=["acne"]))
        assert "Profilo: pelle grassa, 26-35 anni." in message

    def test_age_only(self):
        assert "Profilo: 46-60 anni." in get_personalized_message(UserProfile(age=50))

    def test_nothing_known(self):
        assert "Profilo" not in get_personalized_message(UserProfile())

    def test_secondary_concerns_listed(self):
        message = get_personalized_message(UserProfile(concerns=["acne", "pigmentazione", "occhiaie"]))
        assert "Ho tenuto conto anche di: macchie e discromie, occhiaie." in message

    def test_headline_concerns_not_repeated(self):
        message = get_personalized_message(UserProfile(concerns=["acne", "rossori"]))
        assert "Ho tenuto conto" not in message

    def test_nessuna(self):
        message = get_personalized_message(UserProfile(skin_type=SkinType.SECCA, concerns=["nessuna", "acne"]))
        assert message.startswith("💫")
        assert "Ho tenuto conto" not in message


@pytest.mark.parametrize(
    "age, expected",
    [(None, None), (18, "16-25 anni"), (25, "16-25 anni"), (26, "26-35 anni"), (45, "36-45 anni"), (60, "46-60 anni"), (61, "over 60")],
)
def test_age_bracket(age, expected):
    assert age_bracket(age) == expected
