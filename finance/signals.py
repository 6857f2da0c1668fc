from django.db.models.signals import post_save
from django.dispatch import receiver
from django.contrib.auth import get_user_model
from .models import Wallet

User = get_user_model()

@receiver(post_save, sender=User, dispatch_uid='finance.open_wallet')
def open_wallet(sender, instance, created, raw=False, **kwargs):
    """
    Every account starts with an empty wallet so it can fund or receive milestones.
    Fixture loading (raw=True) brings its own wallet rows.
    """
    if created and not raw:
        Wallet.objects.get_or_create(user=instance)
