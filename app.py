"""Command line runner for Vote4Us: producer statistics and a dry run of the vote."""

import argparse
import sys
import logging
from vote4us import Vote4Us, Vote4UsConfig
from vote4us.exceptions import ConfigError, VoteSelectionError
from vote4us.types import LoggedAccount

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger('vote4us')


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Show the ranking of a block producer and the producers a vote for it would submit."
    )
    parser.add_argument('--producer', help="Producer to vote for (VOTE4US_CURRENT_PRODUCER)")
    parser.add_argument('--rpc-url', help="Chain API endpoint (VOTE4US_RPC_URL)")
    parser.add_argument('--expected-bps', type=int, help="Row count that ends the producer table retries")
    parser.add_argument('--account', help="Voter account to build a vote for (dry run, nothing is signed)")
    parser.add_argument('--permission', default='active', help="Permission of the voter account")
    parser.add_argument('--no-recommended', action='store_true', help="Do not fill free slots with recommended producers")
    parser.add_argument('--replace', help="Producer to replace when the voter has no free slot")
    parser.add_argument('--debug', action='store_true', help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = Vote4UsConfig.from_env(
            current_producer=args.producer,
            rpc_endpoint=args.rpc_url,
            expected_bps=args.expected_bps
        )
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    session = Vote4Us(config)
    statistics = session.start_fetching_statistics()

    if not statistics.found:
        print(f"{config.current_producer}: no statistics ({statistics.status})")
    else:
        print(f"Producer:    {config.current_producer}")
        print(f"Rank:        {statistics.rank} of {len(statistics.list)}")
        print(f"Votes:       {statistics.votes:,}")
        print(f"Total votes: {statistics.total_votes:,}")
        print(f"Share:       {statistics.percentage}")

    if not args.account:
        return 0

    session.login(LoggedAccount(name=args.account, permission=args.permission))
    state = session.state
    if state.has_voted_for_us:
        print(f"{args.account} already votes for {config.current_producer}")
        return 0

    session.set_add_recommended(not args.no_recommended)
    if state.selection.room_for_more == 0:
        if not args.replace:
            logger.error(f"{args.account} has no free slot, pass --replace with one of: {', '.join(state.selection.original)}")
            return 1
        try:
            session.drop_bp(args.replace)
        except VoteSelectionError as e:
            logger.error(str(e))
            return 1

    producers = session.preview_vote()
    print(f"Vote of {args.account} would submit {len(producers)} producers:")
    for producer in producers:
        print(f"  {producer}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
