"""
main.py
Entry point for the Dead Chat Discord bot.
Loads the Dead Chat listener, the quarantine purge and the operator commands.
"""

from __future__ import annotations
import asyncio
import logging
import logging.handlers
import os
import sys
from pathlib import Path

import discord
from discord.ext import commands
from dotenv import load_dotenv

# ──────────────────────────────────────────────
# Environment
# ──────────────────────────────────────────────
load_dotenv()

DISCORD_TOKEN = os.getenv("DISCORD_BOT_TOKEN", "")
LOG_LEVEL     = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

EXTENSIONS = ("bot.deadchat", "bot.purge", "bot.commands")

LOG_FILE    = Path("logs") / "deadchat.log"
LOG_FORMAT  = "[%(asctime)s] [%(levelname)-8s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

log = logging.getLogger("deadchat.main")


# ──────────────────────────────────────────────
# Logging setup
# ──────────────────────────────────────────────

def configure_logging(level: str = LOG_LEVEL, log_file: Path = LOG_FILE) -> list[logging.Handler]:
    """Attach stdout and a rotating file (5 MB x 3) to the root logger."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
        logging.handlers.RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8",
        ),
    ]
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    # discord.py logs every gateway payload at DEBUG
    logging.getLogger("discord").setLevel(max(root.level, logging.INFO))
    return handlers


# ──────────────────────────────────────────────
# Bot subclass
# ──────────────────────────────────────────────

class DeadChatBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members         = True
        super().__init__(command_prefix="!", intents=intents)

    async def setup_hook(self) -> None:
        """Called once after login, before the gateway connects."""
        for ext in EXTENSIONS:
            await self._load_ext(ext)
        log.info("Setup complete. %d of %d extensions loaded.", len(self.extensions), len(EXTENSIONS))

    async def _load_ext(self, module: str) -> None:
        """Load a cog; a failure (e.g. missing config) disables only that cog."""
        try:
            await self.load_extension(module)
            log.info("Loaded extension: %s", module)
        except commands.ExtensionFailed as e:
            log.error("Extension %s disabled: %s", module, e.original)
        except Exception as e:
            log.exception("Failed to load extension %s: %s", module, e)

    async def close(self) -> None:
        log.info("Shutting down bot...")
        dead_chat = self.get_cog("DeadChat")
        if dead_chat is not None:
            dead_chat.hint.cancel()
        await super().close()


# ──────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────

async def run(token: str) -> None:
    async with DeadChatBot() as bot:
        await bot.start(token)


def main() -> None:
    configure_logging()
    if not DISCORD_TOKEN:
        log.error("DISCORD_BOT_TOKEN is missing; set it in the environment or in .env.")
        raise SystemExit(1)

    try:
        asyncio.run(run(DISCORD_TOKEN))
    except KeyboardInterrupt:
        log.info("Interrupted, shutting down.")
    except discord.PrivilegedIntentsRequired as e:
        log.error("Enable the Message Content and Server Members intents for this bot: %s", e)
        raise SystemExit(1)
    except discord.LoginFailure as e:
        log.error("Discord rejected the bot token: %s", e)
        raise SystemExit(1)
    except Exception:
        log.exception("Bot stopped on an unexpected error.")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
