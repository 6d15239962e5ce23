"""
Tests for canned fun responses.
"""

import random

import pytest

from modules import responses


@pytest.mark.unit
class TestResponses:

    def test_eight_ball_echoes_question(self):
        reply = responses.eight_ball("Will it work?", random.Random(1))

        question, answer = reply.split("\n")
        assert question == "**Question:** Will it work?"
        assert answer in responses.EIGHT_BALL_RESPONSES

    def test_joke_and_quote_come_from_pools(self):
        rng = random.Random(2)

        assert responses.joke(rng) in responses.JOKES
        assert responses.quote(rng)[2:] in responses.QUOTES

    def test_coinflip_sides(self):
        rng = random.Random(3)
        results = {responses.coinflip(rng) for _ in range(50)}

        assert results == {
            "🪙 The coin landed on: **Heads**!",
            "🪙 The coin landed on: **Tails**!",
        }

    @pytest.mark.parametrize("sides", [2, 6, 100])
    def test_dice_within_range(self, sides):
        rng = random.Random(sides)
        for _ in range(20):
            reply = responses.roll_dice(sides, rng)
            value = int(reply.split("**")[1])
            assert 1 <= value <= sides
            assert reply.endswith(f"(1-{sides})")

    @pytest.mark.parametrize("sides", [1, 0, 101])
    def test_dice_rejects_bad_sides(self, sides):
        assert not responses.valid_dice_sides(sides)
        with pytest.raises(ValueError):
            responses.roll_dice(sides, random.Random())
