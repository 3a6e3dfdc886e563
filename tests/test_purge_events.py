from __future__ import annotations

import unittest
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from types import SimpleNamespace
from unittest import mock

from discord_fakes import BOT_USER_ID
from discord_fakes import FakeChannel
from discord_fakes import FakeGuild
from discord_fakes import FakeMember
from discord_fakes import FakeMessage
from bot.config import PurgeSettings
from bot.purge import QuarantinePurge
from bot.purge import gained_role

CHANNEL_ID = 300
QUARANTINE_ROLE_ID = 777
SELF = SimpleNamespace(id=BOT_USER_ID, bot=True)
HUMAN = SimpleNamespace(id=3, bot=False)


def _recent(content: str, minutes_ago: int, author=HUMAN) -> FakeMessage:
    created = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
    return FakeMessage(author=author, content=content, created_at=created)


class GainedRoleTests(unittest.TestCase):
    def test_edge_only(self):
        without = FakeMember(5)
        with_role = FakeMember(5, roles={QUARANTINE_ROLE_ID})
        self.assertTrue(gained_role(without, with_role, QUARANTINE_ROLE_ID))
        self.assertFalse(gained_role(with_role, with_role, QUARANTINE_ROLE_ID))
        self.assertFalse(gained_role(with_role, without, QUARANTINE_ROLE_ID))
        self.assertFalse(gained_role(without, without, QUARANTINE_ROLE_ID))


class QuarantinePurgeTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.channel_patch = mock.patch("bot.purge.discord.TextChannel", FakeChannel)
        self.channel_patch.start()
        self.guild = FakeGuild()
        self.channel = self.guild.add_channel(
            FakeChannel(
                CHANNEL_ID,
                [
                    _recent("after", 1),
                    _recent("anchor", 2, author=SELF),
                    _recent("before", 3),
                ],
            )
        )
        bot = SimpleNamespace(user=SimpleNamespace(id=BOT_USER_ID))
        self.cog = QuarantinePurge(bot, PurgeSettings(channel_id=CHANNEL_ID, role_id=QUARANTINE_ROLE_ID))

    async def asyncTearDown(self):
        self.channel_patch.stop()

    def _members(self):
        before = self.guild.add_member(FakeMember(5))
        after = FakeMember(5, roles={QUARANTINE_ROLE_ID})
        after.guild = self.guild
        return before, after

    async def test_new_quarantine_purges_up_to_anchor(self):
        before, after = self._members()
        await self.cog.on_member_update(before, after)
        self.assertEqual(len(self.channel.deleted_batches), 1)
        self.assertEqual({m.content for m in self.channel.deleted_batches[0]}, {"anchor", "before"})
        self.assertEqual([m.content for m in self.channel.messages], ["after"])

    async def test_already_quarantined_does_not_purge_again(self):
        _, after = self._members()
        await self.cog.on_member_update(after, after)
        self.assertEqual(self.channel.deleted_batches, [])

    async def test_other_role_changes_are_ignored(self):
        before = FakeMember(5)
        after = FakeMember(5, roles={1234})
        after.guild = self.guild
        await self.cog.on_member_update(before, after)
        self.assertEqual(self.channel.deleted_batches, [])

    async def test_missing_channel_is_logged_not_raised(self):
        self.guild.channels.clear()
        with self.assertLogs("deadchat.purge.events", level="ERROR"):
            count = await self.cog.purge(self.guild)
        self.assertEqual(count, 0)

    async def test_bulk_delete_failure_is_logged(self):
        self.channel.fail_delete_messages = True
        with self.assertLogs("deadchat.purge.events", level="ERROR"):
            count = await self.cog.purge(self.guild)
        self.assertEqual(count, 0)
        self.assertEqual(len(self.channel.messages), 3)


if __name__ == "__main__":
    unittest.main()
