from __future__ import annotations

import unittest
from types import SimpleNamespace

import discord

from revival.classifier import is_activity
from revival.classifier import is_emoji_only
from revival.classifier import is_noise

CHANNEL_ID = 100
AUTHOR_ID = 7


def _message(content: str = "hello", **overrides):
    payload = dict(
        author=SimpleNamespace(id=AUTHOR_ID, bot=False),
        channel=SimpleNamespace(id=CHANNEL_ID),
        type=discord.MessageType.default,
        content=content,
        attachments=[],
        stickers=[],
    )
    payload.update(overrides)
    return SimpleNamespace(**payload)


class EmojiOnlyTests(unittest.TestCase):
    def test_unicode_emoji_only(self):
        self.assertTrue(is_emoji_only("😀 🎉"))
        self.assertTrue(is_emoji_only("👍🏽"))
        self.assertTrue(is_emoji_only("❤️"))
        self.assertTrue(is_emoji_only("👨‍👩‍👧"))

    def test_symbol_pictographs_only(self):
        for text in ("▶️", "‼️", "©️", "™️", "↔️", "〰️", "ℹ️", "Ⓜ️", "◀️ ▶️"):
            with self.subTest(text=text):
                self.assertTrue(is_emoji_only(text))
        for text in ("®", "⁉", "↩", "◻", "◼", "⤴", "⤵", "〽", "㊗", "㊙"):
            with self.subTest(text=text):
                self.assertTrue(is_emoji_only(text))

    def test_keycaps_and_flags_only(self):
        self.assertTrue(is_emoji_only("1️⃣ #️⃣"))
        self.assertTrue(is_emoji_only("🇺🇦"))

    def test_plain_digits_and_punctuation_are_text(self):
        self.assertFalse(is_emoji_only("123"))
        self.assertFalse(is_emoji_only("!!"))
        self.assertFalse(is_emoji_only("(c)"))

    def test_symbol_pictograph_post_does_not_count_as_activity(self):
        message = _message("▶️ ‼️")
        self.assertFalse(is_activity(message, channel_id=CHANNEL_ID))

    def test_custom_emotes_only(self):
        self.assertTrue(is_emoji_only("<:pepe:123456789> <a:dance:987654321>"))
        self.assertTrue(is_emoji_only("  <:pepe:1>😀  "))

    def test_text_with_emoji_is_not_emoji_only(self):
        self.assertFalse(is_emoji_only("hi 😀"))
        self.assertFalse(is_emoji_only("<:pepe:1> lol"))

    def test_empty_text_is_not_emoji_only(self):
        self.assertFalse(is_emoji_only(""))
        self.assertFalse(is_emoji_only("   "))


class NoiseTests(unittest.TestCase):
    def test_attachment_only_is_noise(self):
        self.assertTrue(is_noise(_message("", attachments=[object()])))

    def test_sticker_only_is_noise(self):
        self.assertTrue(is_noise(_message("", stickers=[object()])))

    def test_attachments_and_stickers_without_text_is_noise(self):
        self.assertTrue(is_noise(_message("  ", attachments=[object()], stickers=[object()])))

    def test_emoji_with_attachment_is_not_noise(self):
        self.assertFalse(is_noise(_message("😀", attachments=[object()])))

    def test_emoji_only_without_media_is_noise(self):
        self.assertTrue(is_noise(_message("😀")))


class IsActivityTests(unittest.TestCase):
    def _check(self, message, ignored=()):
        return is_activity(message, channel_id=CHANNEL_ID, ignored_user_ids=ignored)

    def test_plain_text_counts(self):
        self.assertTrue(self._check(_message("anyone around?")))

    def test_bot_author_does_not_count(self):
        self.assertFalse(self._check(_message(author=SimpleNamespace(id=AUTHOR_ID, bot=True))))

    def test_other_channel_does_not_count(self):
        self.assertFalse(self._check(_message(channel=SimpleNamespace(id=999))))

    def test_join_notice_does_not_count(self):
        self.assertFalse(self._check(_message("", type=discord.MessageType.new_member)))

    def test_ignored_author_does_not_count(self):
        self.assertFalse(self._check(_message("hello"), ignored=frozenset({AUTHOR_ID})))

    def test_noise_does_not_count(self):
        self.assertFalse(self._check(_message("🎉🎉")))
        self.assertFalse(self._check(_message("", attachments=[object()])))

    def test_missing_fields_never_raise(self):
        bare = SimpleNamespace(author=SimpleNamespace(id=AUTHOR_ID), channel=SimpleNamespace(id=CHANNEL_ID))
        self.assertTrue(self._check(bare))
        self.assertFalse(self._check(SimpleNamespace()))


if __name__ == "__main__":
    unittest.main()
