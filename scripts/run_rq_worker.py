"""Run an RQ worker inside the Flask app context.

Usage:
  source .venv/bin/activate
  python scripts/run_rq_worker.py

The app and extensions are initialized in the worker process so mail and
DREETS jobs can use `current_app`, templates and the SQLAlchemy session.
"""

import sys
import os

# project root on sys.path when running from scripts/ or another cwd
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
  sys.path.insert(0, ROOT)

from neurocare import create_app
import redis
from rq import Worker, Queue


def main():
  app = create_app()
  redis_url = app.config.get('REDIS_URL') or os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
  conn = redis.from_url(redis_url)
  with app.app_context():
    q = Queue('default', connection=conn)
    worker = Worker([q], connection=conn)
    app.logger.info('RQ worker starting (pid %s)', os.getpid())
    try:
      worker.work(burst=False, with_scheduler=True)
    finally:
      app.logger.info('RQ worker exiting (pid %s)', os.getpid())


if __name__ == '__main__':
  main()
