# FILE: medvanta/backend/users/services/profile_service.py

"""
PROFILE SERVICE

Member listing for the users table, profile edits and quick add.
"""

import logging
import uuid
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Exists, OuterRef, Q, Subquery

from core.exceptions import NotFoundException, ValidationFailedException
from organizations.models import Organization, OrganizationMember, Team, TeamMembership
from programs.models import ProgramAssignment

logger = logging.getLogger(__name__)

User = get_user_model()


class ProfileService:
    """
    Service for member profiles.
    """

    EDITABLE_FIELDS = ("first_name", "last_name", "phone", "description", "timezone")

    def list_with_stats(
        self,
        organization_id: Optional[uuid.UUID] = None,
        team_id: Optional[uuid.UUID] = None,
        journey_phase: Optional[str] = None,
        status: Optional[str] = None,
        search: str = "",
    ):
        """
        Members for the users table, newest first.

        Each row is annotated with its active program (name, weeks, start
        date) and whether the member sits in the super admin organization.

        Args:
            organization_id: Only active members of this organization
            team_id: Only members of this team
            journey_phase: discovery / onboarding / scaffolding
            status: pending / invited / active / assigned
            search: Case-insensitive match on name or email
        """
        active_assignment = ProgramAssignment.objects.filter(
            user=OuterRef("pk"),
            status=ProgramAssignment.Status.ACTIVE,
        )

        queryset = User.objects.annotate(
            program_name=Subquery(active_assignment.values("program_template__name")[:1]),
            program_weeks=Subquery(active_assignment.values("program_template__weeks")[:1]),
            program_start_date=Subquery(active_assignment.values("start_date")[:1]),
            active_assignment_id=Subquery(active_assignment.values("id")[:1]),
            is_super_admin=Exists(
                OrganizationMember.objects.filter(
                    user=OuterRef("pk"),
                    organization__is_super_admin=True,
                    is_active=True,
                )
            ),
        )

        if organization_id:
            queryset = queryset.filter(
                organization_memberships__organization_id=organization_id,
                organization_memberships__is_active=True,
            )
        if team_id:
            queryset = queryset.filter(team_memberships__team_id=team_id)
        if journey_phase:
            queryset = queryset.filter(journey_phase=journey_phase)
        if status:
            queryset = queryset.filter(status=status)

        search = (search or "").strip()
        if search:
            queryset = queryset.filter(
                Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
                | Q(email__icontains=search)
            )

        return queryset.distinct().order_by("-date_joined")

    def get_user(self, user_id: uuid.UUID):
        try:
            return User.objects.get(id=user_id)
        except User.DoesNotExist:
            raise NotFoundException("User not found.")

    def update_user(self, user_id: uuid.UUID, **fields):
        user = self.get_user(user_id)
        unknown = set(fields) - set(self.EDITABLE_FIELDS)
        if unknown:
            raise ValidationFailedException(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        for key, value in fields.items():
            setattr(user, key, (value or "").strip())
        user.save(update_fields=list(fields) + ["updated_at"])
        logger.info(f"Profile {user.id} updated: {', '.join(sorted(fields))}")
        return user

    def delete_user(self, user_id: uuid.UUID) -> None:
        user = self.get_user(user_id)
        user.delete()
        logger.info(f"User {user_id} deleted")

    @transaction.atomic
    def quick_add(
        self,
        email: str,
        first_name: str = "",
        last_name: str = "",
        organization_id: Optional[uuid.UUID] = None,
        team_id: Optional[uuid.UUID] = None,
    ):
        """
        Create a pending member and place them in an organization and team.

        Args:
            email: Login email, compared case-insensitively
            first_name, last_name: Display names (trimmed)
            organization_id: Organization to join as a member
            team_id: Team to join; its organization is used when none is given

        Returns:
            The created User
        """
        email = (email or "").strip().lower()
        if not email:
            raise ValidationFailedException("Email is required.")
        if User.objects.filter(email__iexact=email).exists():
            raise ValidationFailedException("A user with this email already exists.")

        team = None
        if team_id:
            try:
                team = Team.objects.get(id=team_id)
            except Team.DoesNotExist:
                raise NotFoundException("Team not found.")
            if organization_id and team.organization_id != organization_id:
                raise ValidationFailedException("The team does not belong to this organization.")
            organization_id = team.organization_id

        if organization_id and not Organization.objects.filter(id=organization_id).exists():
            raise NotFoundException("Organization not found.")

        user = User.objects.create_user(
            email=email,
            first_name=(first_name or "").strip(),
            last_name=(last_name or "").strip(),
            status=User.Status.PENDING,
        )

        if organization_id:
            OrganizationMember.objects.create(
                organization_id=organization_id,
                user=user,
                role=OrganizationMember.Role.MEMBER,
                is_active=True,
            )
        if team:
            TeamMembership.objects.create(team=team, user=user)

        logger.info(f"Quick add created user {user.id} (organization={organization_id}, team={team_id})")
        return user
