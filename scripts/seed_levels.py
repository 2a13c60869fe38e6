"""Write the level table (and the built-in achievements) into the database.

Usage:
    python scripts/seed_levels.py [--max-level 100] [--skip-achievements]
"""
import argparse
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from codequest_app import create_app
from codequest_app.config import Config
from codequest_app.modules.gamification.services.achievement_service import AchievementService
from codequest_app.modules.progression.services.level_service import LevelService


class SeedConfig(Config):
    SCHEDULER_ENABLED = False


def main(argv=None):
    parser = argparse.ArgumentParser(description='Seed the CodeQuest level table.')
    parser.add_argument('--max-level', type=int, default=None,
                        help='Highest level to write (default: LEVEL_MAX from config)')
    parser.add_argument('--skip-achievements', action='store_true',
                        help='Do not insert the built-in achievements')
    args = parser.parse_args(argv)

    app = create_app(SeedConfig)
    with app.app_context():
        count = LevelService.seed_levels(args.max_level)
        print(f"Seeded {count} levels.")

        if not args.skip_achievements:
            added = AchievementService.seed_defaults()
            print(f"Added {added} achievements.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
