"""
Command line entry point
Runs local raffle rounds and inspects stored raffle data
"""

import argparse
import os
import sys

from dotenv import load_dotenv
from sqlalchemy import create_engine

from .config import DATABASE_URL, DEVELOPMENT_CHAINS, RAFFLE_NETWORK
from .database import RaffleStore, setup_raffle_database
from .errors import RaffleError
from .local_network import deploy_local_raffle
from .logging_config import setup_logging
from .publisher import RaffleEventPublisher
from .scheduler import KeeperScheduler
from .state import RafflePhase


def _engine(database_url):
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    return create_engine(database_url)


def _open_store(database_url, raffle_name):
    engine = _engine(database_url)
    if not setup_raffle_database(engine):
        return None
    return RaffleStore(engine, raffle_name)


def cmd_simulate(args):
    """Run full rounds against the local coordinator"""
    store = None
    if args.database_url:
        store = _open_store(args.database_url, args.raffle)
        if store is None:
            print("❌ Failed to setup database")
            return 1

    publisher = RaffleEventPublisher()
    deployment = deploy_local_raffle(args.network, store=store, publisher=publisher)
    raffle = deployment.raffle

    if raffle.raffle_state != RafflePhase.OPEN:
        print(f"❌ Stored raffle '{args.raffle}' is waiting on request "
              f"{raffle.outstanding_request_id}; it cannot be resumed on a fresh local coordinator")
        return 1

    keeper = KeeperScheduler(raffle, poll_seconds=args.interval, stale_after=None)
    fee = raffle.entrance_fee

    print(f"🎟️ Simulating {args.rounds} round(s) with {args.players} player(s) (fee: {fee})")
    print("=" * 50)

    for round_number in range(1, args.rounds + 1):
        try:
            for i in range(1, args.players + 1):
                account = f"player-{i}"
                deployment.bank.fund(account, fee)
                deployment.bank.withdraw(account, fee)
                raffle.enter(account, fee)

            deployment.clock.advance(raffle.interval + 1)
            if not keeper.poll_once():
                print(f"❌ Round {round_number}: upkeep was not needed")
                return 1

            request_id = raffle.outstanding_request_id
            deployment.coordinator.fulfill_random_words(request_id)
        except RaffleError as e:
            print(f"❌ Round {round_number} failed: {e}")
            return 1

        winner = raffle.recent_winner
        print(f"🎉 Round {round_number}: {winner} won "
              f"(request {request_id}, balance {deployment.bank.balance_of(winner)})")

    print(f"\n✅ {args.rounds} round(s) completed, {len(raffle.events)} events recorded")
    return 0


def cmd_history(args):
    """Print stored draws"""
    store = _open_store(args.database_url, args.raffle)
    if store is None:
        print("❌ Failed to setup database")
        return 1

    history = store.get_draw_history(limit=args.limit)
    if not history:
        print(f"No draws recorded for raffle '{args.raffle}'")
        return 0

    print(f"🏆 Last {len(history)} draw(s) for raffle '{args.raffle}':")
    for draw in history:
        print(f"   • {draw['winner']} won {draw['prize']} "
              f"(entry #{draw['winner_index']} of {draw['total_players']}, request {draw['request_id']})")
    return 0


def cmd_status(args):
    """Print the stored raffle state"""
    store = _open_store(args.database_url, args.raffle)
    if store is None:
        print("❌ Failed to setup database")
        return 1

    state = store.load()
    if state is None:
        print(f"No state stored for raffle '{args.raffle}'")
        return 0

    print(f"📊 Raffle '{args.raffle}'")
    print(f"   Phase: {state.phase.name}")
    print(f"   Players: {len(state.players)}")
    print(f"   Pool: {state.pool_balance}")
    print(f"   Recent winner: {state.recent_winner if state.recent_winner is not None else '-'}")
    if state.outstanding_request_id is not None:
        print(f"   Waiting on request: {state.outstanding_request_id}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="keeper-raffle", description="Keeper-driven raffle tools")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--raffle", default="default", help="Raffle name in the database")
    subparsers = parser.add_subparsers(dest="command", required=True)

    simulate = subparsers.add_parser("simulate", help="Run local raffle rounds")
    simulate.add_argument("--players", type=int, default=4)
    simulate.add_argument("--rounds", type=int, default=1)
    simulate.add_argument("--network", default=os.getenv("RAFFLE_NETWORK", RAFFLE_NETWORK))
    simulate.add_argument("--interval", type=int, default=1, help="Keeper poll seconds")
    simulate.add_argument("--database-url", default=None, help="Persist to this database")
    simulate.set_defaults(func=cmd_simulate)

    history = subparsers.add_parser("history", help="Show stored draws")
    history.add_argument("--database-url", default=os.getenv("DATABASE_URL", DATABASE_URL))
    history.add_argument("--limit", type=int, default=5)
    history.set_defaults(func=cmd_history)

    status = subparsers.add_parser("status", help="Show stored raffle state")
    status.add_argument("--database-url", default=os.getenv("DATABASE_URL", DATABASE_URL))
    status.set_defaults(func=cmd_status)

    return parser


def main(argv=None):
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_logging('keeper_raffle', args.log_level)

    if getattr(args, "players", 1) < 1:
        print("❌ At least one player is needed")
        return 1
    if getattr(args, "network", "localhost") not in DEVELOPMENT_CHAINS:
        print(f"❌ {args.network} is not a development network")
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
