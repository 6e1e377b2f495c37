# FILE: medvanta/backend/organizations/models.py

import uuid
from django.db import models
from django.conf import settings
from django.core.validators import FileExtensionValidator


def organization_picture_upload_path(instance, filename):
    """Generate upload path for organization pictures"""
    ext = filename.split('.')[-1].lower()
    return f"organizations/{instance.id}/{uuid.uuid4()}.{ext}"


class Organization(models.Model):
    """
    Clinic or partner organization.

    Exactly one organization is expected to carry is_super_admin; its
    active admin members administer every organization.
    """

    class Meta:
        db_table = 'organizations_organization'
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active']),
            models.Index(fields=['is_super_admin']),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    picture = models.FileField(
        upload_to=organization_picture_upload_path,
        null=True,
        blank=True,
        validators=[FileExtensionValidator(allowed_extensions=['jpg', 'jpeg', 'png', 'webp'])]
    )

    is_active = models.BooleanField(default=True)
    is_super_admin = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class OrganizationMember(models.Model):
    """
    Membership of a user in an organization.
    """

    class Role(models.TextChoices):
        ADMIN = 'admin', 'Admin'
        MEMBER = 'member', 'Member'
        PATIENT = 'patient', 'Patient'

    class Meta:
        db_table = 'organizations_member'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'user'],
                name='unique_organization_member'
            )
        ]
        indexes = [
            models.Index(fields=['organization', 'is_active']),
            models.Index(fields=['user', 'role']),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='members'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='organization_memberships'
    )
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.PATIENT)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user} in {self.organization} ({self.role})"


class Team(models.Model):
    """
    Group of patients inside an organization.
    """

    class Meta:
        db_table = 'organizations_team'
        ordering = ['name']
        indexes = [
            models.Index(fields=['organization', 'name']),
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='teams'
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.organization})"


class TeamMembership(models.Model):

    class Meta:
        db_table = 'organizations_team_membership'
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['team', 'user'],
                name='unique_team_membership'
            )
        ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    team = models.ForeignKey(
        Team,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='team_memberships'
    )

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user} in {self.team.name}"
