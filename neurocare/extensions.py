from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from redis import Redis
from rq import Queue
from flask import current_app

# RQ options that must not leak into a synchronous call
_RQ_KEYS = {'job_timeout', 'timeout', 'at_front', 'depends_on', 'result_ttl', 'ttl', 'meta', 'description'}


class RQWrapper:
    def __init__(self):
        self.redis = None
        self.queue = None

    def init_app(self, app):
        url = app.config.get("REDIS_URL")
        if not url:
            self.redis = None
            self.queue = None
            return
        try:
            self.redis = Redis.from_url(url)
            self.queue = Queue("default", connection=self.redis)
        except Exception:
            # no Redis on this machine: jobs run inline
            app.logger.exception('Redis/RQ init failed, falling back to sync execution')
            self.redis = None
            self.queue = None

    def _run_sync(self, *args, **kwargs):
        func = args[0] if args else None
        if not func:
            return None
        safe_kwargs = {k: v for k, v in kwargs.items() if k not in _RQ_KEYS}
        try:
            return func(*args[1:], **safe_kwargs)
        except Exception:
            current_app.logger.exception('Synchronous job execution failed: %s', getattr(func, '__name__', func))
        return None

    def enqueue(self, *args, **kwargs):
        """Enqueue a job on RQ, or run it inline when Redis is unavailable.

        Jobs are fire-and-forget: a failing job is logged and never
        propagates to the caller.
        """
        if not self.queue:
            return self._run_sync(*args, **kwargs)
        try:
            return self.queue.enqueue(*args, **kwargs)
        except Exception:
            current_app.logger.exception('RQ enqueue failed, falling back to sync execution')
            return self._run_sync(*args, **kwargs)


db = SQLAlchemy()
login_manager = LoginManager()
rq = RQWrapper()
