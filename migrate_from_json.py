"""
============================================================================
MIGRATION SCRIPT - LEGACY JSON FILES
============================================================================
Import data from the old JavaScript bot.

This script will:
1. Read the old user-levels.json and server-settings.json
2. Recompute every level from total XP with the current curve
3. Write the progression snapshot in the current format
4. Import server settings (prefix, channels, auto role) into SQLite

Usage:
    python migrate_from_json.py [old_levels.json] [old_settings.json]

Before running:
- Backup your JSON files first!
- Bot should NOT be running
"""

import asyncio
import json
import sys
from pathlib import Path

from database import Database, ProgressionRecord, ProgressionStore
from modules.leveling import level_from_total_xp
import config

# Old camelCase setting names -> settings columns
SETTING_COLUMNS = {
    'prefix': 'prefix',
    'welcomeChannel': 'welcome_channel',
    'logChannel': 'log_channel',
    'autoRole': 'auto_role',
}


async def migrate_levels(levels_path: Path, store: ProgressionStore) -> int:
    """Import leveling records. Returns the number of records written."""
    with open(levels_path, 'r', encoding='utf-8') as f:
        old_levels = json.load(f)

    migrated = 0
    for key, data in old_levels.items():
        try:
            old = ProgressionRecord.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            print(f"⚠️  Skipping {key}: {e}")
            continue

        record = store.get_or_create(old.user_id, old.guild_id)
        record.total_xp = old.total_xp
        record.level, record.xp = level_from_total_xp(old.total_xp)
        record.messages = old.messages
        record.last_xp_gain = old.last_xp_gain
        record.last_daily_login = old.last_daily_login
        record.weekly_xp = old.weekly_xp
        record.prestige = old.prestige
        record.active_boosters = old.active_boosters
        record.voice_minutes = old.voice_minutes
        migrated += 1

    await store.persist()
    return migrated


async def migrate_settings(settings_path: Path, db: Database) -> int:
    """Import per-server settings. Returns the number of servers imported."""
    with open(settings_path, 'r', encoding='utf-8') as f:
        old_settings = json.load(f)

    migrated = 0
    for guild_id, settings in old_settings.items():
        values = {
            SETTING_COLUMNS[key]: value
            for key, value in settings.items()
            if key in SETTING_COLUMNS
        }
        await db.update_guild_settings(guild_id, **values)
        migrated += 1

    return migrated


async def migrate(levels_path: Path, settings_path: Path):
    """Main migration function."""

    print("=" * 60)
    print("SAIYANBOT DATA MIGRATION - LEGACY JSON")
    print("=" * 60)

    if levels_path.exists():
        print(f"\n📂 Migrating levels from {levels_path}...")
        store = ProgressionStore(config.LEVELS_FILE)
        await store.initialize()
        count = await migrate_levels(levels_path, store)
        print(f"✅ Migrated {count} leveling records into {config.LEVELS_FILE}")
    else:
        print(f"⚠️  File not found: {levels_path} (skipping levels)")

    if settings_path.exists():
        print(f"\n📂 Migrating server settings from {settings_path}...")
        db = Database(config.DATABASE_PATH)
        await db.initialize()
        try:
            count = await migrate_settings(settings_path, db)
        finally:
            await db.close()
        print(f"✅ Migrated settings for {count} servers into {config.DATABASE_PATH}")
    else:
        print(f"⚠️  File not found: {settings_path} (skipping settings)")

    print("\n" + "=" * 60)
    print("MIGRATION COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    levels = Path(sys.argv[1]) if len(sys.argv) > 1 else Path('user-levels.json')
    settings = Path(sys.argv[2]) if len(sys.argv) > 2 else Path('server-settings.json')
    asyncio.run(migrate(levels, settings))
