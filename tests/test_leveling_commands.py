"""
Tests for the prestige confirmation buttons.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

import config
from commands.leveling_commands import PrestigeConfirmView
from database import SnapshotSaveError
from modules.leveling import level_from_total_xp, total_xp_for_level


def make_interaction(user_id):
    interaction = MagicMock()
    interaction.user.id = int(user_id)
    interaction.response.defer = AsyncMock()
    interaction.response.send_message = AsyncMock()
    interaction.edit_original_response = AsyncMock()
    return interaction


@pytest.mark.unit
class TestPrestigeConfirmView:

    @pytest.mark.asyncio
    async def test_save_failure_gets_error_reply(self, leveling, monkeypatch):
        monkeypatch.setattr(
            leveling, "prestige", AsyncMock(side_effect=SnapshotSaveError("disk full"))
        )
        view = PrestigeConfirmView("1", "100", leveling)
        interaction = make_interaction("1")

        await view.confirm_button.callback(interaction)

        interaction.response.defer.assert_awaited_once()
        interaction.edit_original_response.assert_awaited_once()
        reply = interaction.edit_original_response.await_args.kwargs
        assert reply["content"] == config.ERROR_MESSAGES["generic"]
        assert all(item.disabled for item in view.children)

    @pytest.mark.asyncio
    async def test_successful_prestige_edits_in_embed(self, leveling, store):
        record = store.get_or_create("1", "100")
        record.total_xp = total_xp_for_level(50)
        record.level, record.xp = level_from_total_xp(record.total_xp)
        view = PrestigeConfirmView("1", "100", leveling)
        interaction = make_interaction("1")

        await view.confirm_button.callback(interaction)

        reply = interaction.edit_original_response.await_args.kwargs
        assert reply["embed"].title == "🌟 PRESTIGE ACHIEVED!"
        assert record.prestige == 1

    @pytest.mark.asyncio
    async def test_other_user_cannot_confirm(self, leveling):
        view = PrestigeConfirmView("1", "100", leveling)
        interaction = make_interaction("2")

        await view.confirm_button.callback(interaction)

        interaction.response.send_message.assert_awaited_once()
        interaction.response.defer.assert_not_awaited()
