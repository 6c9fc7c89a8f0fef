"""
Frecency command line.

Examples:
    frecency --resource-type products --record shoes p1
    frecency --resource-type products --rank sho p1 p2 p3
    frecency --resource-type products --stats
    frecency --list
"""

import argparse
import os
import sys

from .config import FrecencyOptions
from .engine import Frecency
from .errors import FrecencyError
from .redis_client import RedisClient


def main(argv=None):
    """CLI for recording and ranking against a Redis-backed store."""
    parser = argparse.ArgumentParser(description='Frecency ranking for search results')
    parser.add_argument('--resource-type', default=os.environ.get('FRECENCY_RESOURCE_TYPE'),
                        help='Resource type whose history to use')
    parser.add_argument('--record', nargs=2, metavar=('QUERY', 'ID'),
                        help='Record a selection of ID for QUERY')
    parser.add_argument('--rank', nargs='+', metavar='ARG',
                        help='QUERY followed by candidate ids to rank')
    parser.add_argument('--stats', action='store_true',
                        help='Show statistics')
    parser.add_argument('--list', action='store_true',
                        help='List resource types with stored history')
    parser.add_argument('--redis-url', default=os.environ.get('REDIS_URL', 'redis://localhost:6379/0'),
                        help='Redis URL')

    args = parser.parse_args(argv)

    redis_client = RedisClient(url=args.redis_url)
    if not redis_client.ping():
        print(f"Error: Cannot connect to Redis at {args.redis_url}")
        return 1

    if args.list:
        prefix = os.environ.get('FRECENCY_KEY_PREFIX', 'frecency_')
        for key in sorted(redis_client.keys(f"{prefix}*")):
            print(key[len(prefix):])

    if not (args.record or args.rank or args.stats):
        return 0

    try:
        options = FrecencyOptions.from_env(resource_type=args.resource_type)
        frecency = Frecency(storage=redis_client, options=options)

        if args.record:
            query, selected_id = args.record
            frecency.record(query, selected_id)
            print(f"Recorded {selected_id} for {query!r}")

        if args.rank:
            query, ids = args.rank[0], args.rank[1:]
            ranked = frecency.rank(query, [{'id': i} for i in ids], 'id')
            for result in ranked:
                print(f"  {result['id']}: {result['_frecency_score']:.1f}")

        if args.stats:
            for name, value in frecency.get_stats().items():
                print(f"{name}: {value}")
    except FrecencyError as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
