"""Tests for the assistant trigger."""

import pytest

from courier.services.assistant_trigger import should_respond


class TestShouldRespond:
    @pytest.mark.parametrize(
        "text",
        [
            "Can you help me?",
            "I need HELP with my order",
            "assistant, are you there",
            "Is this available?",
            "Is this available?   ",
            "¿Tienes esto disponible?",
        ],
    )
    def test_triggers(self, text):
        assert should_respond(text) is True

    @pytest.mark.parametrize(
        "text",
        [
            "Thanks, see you tomorrow.",
            "?? is not at the end",
            "Hola",
            "",
            None,
        ],
    )
    def test_does_not_trigger(self, text):
        assert should_respond(text) is False

    def test_keyword_match_is_substring(self):
        assert should_respond("helpful seller") is True
