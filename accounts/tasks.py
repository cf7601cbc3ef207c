# accounts/tasks.py
import logging

from celery import shared_task

from .services import purge_expired_privileges

logger = logging.getLogger(__name__)


@shared_task
def expire_user_privileges():
    """Delete privilege grants whose expiry time has passed"""
    deleted = purge_expired_privileges()
    logger.info(f"Privilege expiry run removed {deleted} grants")
    return deleted
