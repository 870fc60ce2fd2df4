from datetime import timedelta

import structlog
from celery import shared_task
from django.conf import settings
from django.utils import timezone

from registrations.stores.django_store import DjangoRegistrationStore

logger = structlog.get_logger(__name__)


@shared_task
def clear_expired_edit_tokens() -> dict[str, int]:
    """Null expired edit-token fields and drop issuance records outside the rate-limit window."""
    store = DjangoRegistrationStore()
    now = timezone.now()
    cleared = store.clear_expired_tokens(now)
    pruned = store.prune_token_requests(now - timedelta(minutes=settings.EDIT_TOKEN_REQUEST_WINDOW_MINUTES))
    logger.info("expired_edit_tokens_cleared", cleared=cleared, pruned=pruned)
    return {"cleared": cleared, "pruned": pruned}
