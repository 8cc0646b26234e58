#!/usr/bin/env python3
"""Print a signed scheduling link for an existing candidate record.

Run from project root:
  python scripts/generate_scheduling_link.py <record_id> <email> [--base-url URL]
"""
import argparse
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import Config
from bloombuddies.services.scheduling import scheduling_link


def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate a candidate scheduling link')
    parser.add_argument('record_id', help='candidate record id (e.g. recXXXXXXXXXXXXXX)')
    parser.add_argument('email', help='candidate email the link is signed for')
    parser.add_argument('--base-url', default=Config.FRONTEND_URL)
    args = parser.parse_args(argv)

    link = scheduling_link(args.base_url, Config.SECRET_KEY, args.record_id.strip(), args.email.strip())
    print('Send this link to the candidate:')
    print(link)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
