"""Campaign dashboard project package.

Loads the Celery app at Django startup so the sync tasks declared with
@shared_task bind to the Redis-configured app.
"""

from .celery import app as celery_app  # noqa: F401

__all__ = ("celery_app",)
