# FILE: medvanta/backend/organizations/services/organization_service.py

"""
ORGANIZATION SERVICE

Organization records, memberships and the super admin seat.
"""

import logging
import uuid
from typing import Iterable, List

from django.db import transaction
from django.db.models import Count, Q
from django.contrib.auth import get_user_model

from core.exceptions import NotFoundException, ValidationFailedException
from organizations.models import Organization, OrganizationMember

logger = logging.getLogger(__name__)

User = get_user_model()


class OrganizationService:
    """
    Service for organizations and their members.
    """

    def list_organizations(self, include_inactive: bool = False):
        """Organizations annotated with members_count (active members only)."""
        queryset = Organization.objects.annotate(
            members_count=Count('members', filter=Q(members__is_active=True))
        ).order_by('name')
        if not include_inactive:
            queryset = queryset.filter(is_active=True)
        return queryset

    def get_organization(self, organization_id: uuid.UUID) -> Organization:
        try:
            return Organization.objects.get(id=organization_id)
        except Organization.DoesNotExist:
            raise NotFoundException("Organization not found.")

    def create_organization(self, name: str, description: str = "", **extra) -> Organization:
        name = (name or "").strip()
        if not name:
            raise ValidationFailedException("Organization name is required.")
        organization = Organization.objects.create(
            name=name,
            description=(description or "").strip(),
            **extra
        )
        logger.info(f"Organization {organization.id} created: {name}")
        return organization

    def update_organization(self, organization_id: uuid.UUID, **fields) -> Organization:
        organization = self.get_organization(organization_id)
        if "name" in fields:
            fields["name"] = (fields["name"] or "").strip()
            if not fields["name"]:
                raise ValidationFailedException("Organization name is required.")
        for key, value in fields.items():
            setattr(organization, key, value)
        organization.save()
        return organization

    def delete_organization(self, organization_id: uuid.UUID) -> None:
        organization = self.get_organization(organization_id)
        organization.delete()
        logger.info(f"Organization {organization_id} deleted")

    # =========================================================================
    # MEMBERS
    # =========================================================================

    @transaction.atomic
    def add_members(
        self,
        organization_id: uuid.UUID,
        user_ids: Iterable[uuid.UUID],
        role: str = OrganizationMember.Role.PATIENT,
    ) -> List[OrganizationMember]:
        """
        Add users to an organization, reactivating previous memberships.

        Args:
            organization_id: Target organization
            user_ids: Users to add
            role: Role for new and reactivated memberships

        Returns:
            The active memberships for the given users
        """
        if role not in OrganizationMember.Role.values:
            raise ValidationFailedException(f"Unknown role: {role}")

        organization = self.get_organization(organization_id)
        user_ids = list(dict.fromkeys(user_ids))
        users = list(User.objects.filter(id__in=user_ids))
        if len(users) != len(user_ids):
            raise NotFoundException("One or more users were not found.")

        memberships = []
        for user in users:
            membership, _ = OrganizationMember.objects.update_or_create(
                organization=organization,
                user=user,
                defaults={'role': role, 'is_active': True},
            )
            memberships.append(membership)

        logger.info(f"Added {len(memberships)} member(s) to organization {organization.id} as {role}")
        return memberships

    def remove_member(self, organization_id: uuid.UUID, user_id: uuid.UUID) -> None:
        deleted, _ = OrganizationMember.objects.filter(
            organization_id=organization_id,
            user_id=user_id,
        ).delete()
        if not deleted:
            raise NotFoundException("Membership not found.")
        logger.info(f"Removed user {user_id} from organization {organization_id}")

    def list_members(self, organization_id: uuid.UUID):
        return OrganizationMember.objects.filter(
            organization_id=organization_id,
            is_active=True,
        ).select_related('user')

    # =========================================================================
    # SUPER ADMIN
    # =========================================================================

    def get_super_admin_organization(self) -> Organization:
        organization = Organization.objects.filter(is_super_admin=True).order_by('created_at').first()
        if organization is None:
            raise NotFoundException("Super admin organization is not configured.")
        return organization

    @transaction.atomic
    def make_super_admin(self, user_id: uuid.UUID) -> OrganizationMember:
        """Grant (or reactivate) an admin seat in the super admin organization."""
        organization = self.get_super_admin_organization()
        if not User.objects.filter(id=user_id).exists():
            raise NotFoundException("User not found.")

        membership, created = OrganizationMember.objects.update_or_create(
            organization=organization,
            user_id=user_id,
            defaults={'role': OrganizationMember.Role.ADMIN, 'is_active': True},
        )
        logger.info(f"User {user_id} granted super admin ({'new' if created else 'reactivated'})")
        return membership

    @transaction.atomic
    def revoke_super_admin(self, user_id: uuid.UUID) -> None:
        organization = self.get_super_admin_organization()
        updated = OrganizationMember.objects.filter(
            organization=organization,
            user_id=user_id,
            is_active=True,
        ).update(is_active=False)
        if not updated:
            raise NotFoundException("User is not a super admin.")
        logger.info(f"User {user_id} super admin revoked")
