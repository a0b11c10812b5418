#!/usr/bin/env python3
"""Play a seeded block or foul from the command line and print the action log."""

import argparse
import sys

from blocker import Session
from blocker.core.config_loader import resolve_project_path
from blocker.core.data import ActionType
from blocker.core.engine import Phase
from blocker.core.errors import BlockerError
from blocker.game import Skills, YamlStatisticsStore


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve one block or foul with seeded dice")
    parser.add_argument("--seed", help="Seed word (a suggestion is picked when omitted)")
    parser.add_argument("--action", choices=[t.value for t in ActionType], default="block")
    parser.add_argument("--dice", type=int, default=2, help="Number of block dice (1-3)")
    parser.add_argument("--av", type=int, default=9, help="Defender armour value (1-12)")
    parser.add_argument("--stunty", action="store_true", help="Use the stunty injury table")
    parser.add_argument("--attacker", nargs="*", default=[], help="Attacker skills, e.g. mighty-blow")
    parser.add_argument("--defender", nargs="*", default=[], help="Defender skills, e.g. dodge")
    parser.add_argument("--apothecary", action="store_true", help="Use the apothecary on a casualty")
    parser.add_argument("--config", help="Path to a configuration file")
    parser.add_argument("--save-log", action="store_true", help="Write the session log under logs/")
    return parser.parse_args(argv)


def play(session: Session, args: argparse.Namespace) -> None:
    session.set_skills(Skills.of(args.attacker, args.defender))
    session.select_action(args.action)

    if session.phase == Phase.DICE_SELECT:
        session.select_dice_count(args.dice)
        roll = session.roll_block_dice()
        # The attacker picks the first face rolled
        session.select_result(roll.faces[0])

    session.set_armour_value(args.av, args.stunty)
    session.roll_armour()
    if session.phase == Phase.INJURY_ROLL:
        session.roll_injury()
    if session.phase == Phase.CASUALTY_ROLL:
        session.roll_casualty()
        session.choose_apothecary(args.apothecary)
    if session.action is not None and session.action.sent_off:
        session.argue_the_call()
    session.complete_action()


def build_session(args: argparse.Namespace) -> Session:
    session = Session(config_path=args.config)
    if session.config.statistics_path:
        store_path = resolve_project_path(session.config.statistics_path)
        session.statistics_manager.store = YamlStatisticsStore(store_path)
    return session


def main(argv=None) -> int:
    args = parse_args(argv)
    session = build_session(args)

    seed = args.seed or session.suggest_seed_words()[0]

    try:
        session.start_session(seed)
        play(session, args)
    except (BlockerError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    for entry in session.action_log:
        print(entry.format())

    stats = session.statistics
    print(f"\nRolls recorded: {stats.total_rolls}")
    for row in stats.block_face_report(session.config.deviation_threshold):
        print(f"  {row.face.value:<10} {row.actual:6.1f}% (expected {row.theoretical:.1f}%) {row.deviation.value}")

    if args.save_log:
        path = session.save_log()
        if path:
            print(f"\nLog saved to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
