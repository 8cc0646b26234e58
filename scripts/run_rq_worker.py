"""Process queued notification emails and status webhooks.

Usage:
  python scripts/run_rq_worker.py [--burst]

Uses the same Redis connection and queue the web process enqueues onto, with
the Flask app context pushed so jobs can render mail templates and write
Notification rows. Without REDIS_URL the web process sends mail inline and
there is nothing for a worker to do.
"""

import argparse
import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from rq import Worker

from bloombuddies import create_app
from bloombuddies.extensions import rq


def main(argv=None):
    parser = argparse.ArgumentParser(description='Run the notification worker')
    parser.add_argument('--burst', action='store_true', help='exit once the queue is empty')
    args = parser.parse_args(argv)

    app = create_app()
    if rq.queue is None:
        print('REDIS_URL is not set or Redis is unreachable; notifications are sent inline.')
        return 1

    with app.app_context():
        worker = Worker([rq.queue], connection=rq.redis)
        app.logger.info('notification worker %s listening on %r', worker.name, rq.queue.name)
        worker.work(burst=args.burst, with_scheduler=not args.burst,
                    logging_level=app.config.get('LOG_LEVEL', 'INFO'))
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
