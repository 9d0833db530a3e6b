"""Signal receivers connected in NumbermanConfig.ready()."""

import logging

from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver

from numberman.services import accounts

logger = logging.getLogger(__name__)


@receiver(user_logged_in, dispatch_uid="numberman_sync_account")
def sync_account(sender, request, user, **kwargs):
    """
    Mirror every Django login into an Account.

    Any authentication backend works (password, OAuth, OIDC) as long as the
    user carries an email. Users without one never get an account.
    """
    email = getattr(user, "email", "")
    if not email:
        logger.debug("Login without email, no account synced (user=%s)", user.pk)
        return
    accounts.sign_in(email, name=user.get_full_name())
