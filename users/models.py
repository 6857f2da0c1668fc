from django.db import models
from django.contrib.auth.models import AbstractUser
from django.utils.translation import gettext_lazy as _

class User(AbstractUser):
    """
    Custom User Model for the job board.
    A single account can act as Client, Freelancer, Company or Job Seeker.
    """

    class Roles(models.TextChoices):
        CLIENT = 'client', _('Client')
        FREELANCER = 'freelancer', _('Freelancer')
        COMPANY = 'company', _('Company')
        JOB_SEEKER = 'job_seeker', _('Job Seeker')

    # Basic Info
    full_name = models.CharField(_("Full Name"), max_length=255)
    email = models.EmailField(_("Email Address"), unique=True)
    phone_number = models.CharField(max_length=20, blank=True, null=True)
    profile_image = models.ImageField(upload_to='profile_images/', blank=True, null=True)

    # Role Management (Users can have multiple roles, stored as a list)
    roles = models.JSONField(default=list)
    active_role = models.CharField(
        max_length=20,
        choices=Roles.choices,
        default=Roles.CLIENT
    )

    # Localization
    language_preference = models.CharField(
        max_length=10,
        default='ar',
        choices=[('ar', 'Arabic'), ('en', 'English')]
    )

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username', 'full_name']

    def __str__(self):
        return f"{self.email} ({self.active_role})"

    @property
    def is_platform_admin(self):
        return self.is_staff

    @property
    def display_name(self):
        return self.full_name or self.email
