# FILE: medvanta/backend/organizations/services/team_service.py

"""
TEAM SERVICE

Team CRUD and team membership, including the board move used when an
admin drags a patient card from one team column to another.
"""

import logging
import uuid
from typing import Iterable, List, Optional

from django.db import transaction
from django.db.models import Count, Prefetch

from core.exceptions import (
    NotFoundException,
    ValidationFailedException,
    TeamAssignmentException,
)
from organizations.models import Organization, OrganizationMember, Team, TeamMembership

logger = logging.getLogger(__name__)


class TeamService:
    """
    Service for teams inside an organization.
    """

    def list_teams(self, organization_id: uuid.UUID):
        """Teams of an organization with their members' profiles prefetched."""
        return Team.objects.filter(
            organization_id=organization_id
        ).annotate(
            member_count=Count('memberships')
        ).prefetch_related(
            Prefetch('memberships', queryset=TeamMembership.objects.select_related('user'))
        ).order_by('name')

    def get_team(self, team_id: uuid.UUID) -> Team:
        try:
            return Team.objects.select_related('organization').get(id=team_id)
        except Team.DoesNotExist:
            raise NotFoundException("Team not found.")

    def create_team(
        self,
        organization_id: uuid.UUID,
        name: str,
        description: str = "",
        notes: str = "",
    ) -> Team:
        name = (name or "").strip()
        if not name:
            raise ValidationFailedException("Team name is required.")
        if not Organization.objects.filter(id=organization_id).exists():
            raise NotFoundException("Organization not found.")

        team = Team.objects.create(
            organization_id=organization_id,
            name=name,
            description=(description or "").strip(),
            notes=(notes or "").strip(),
        )
        logger.info(f"Team {team.id} created in organization {organization_id}")
        return team

    def update_team(self, team_id: uuid.UUID, **fields) -> Team:
        team = self.get_team(team_id)
        for key in ('name', 'description', 'notes'):
            if key in fields:
                value = (fields[key] or "").strip()
                if key == 'name' and not value:
                    raise ValidationFailedException("Team name is required.")
                setattr(team, key, value)
        team.save()
        return team

    def delete_team(self, team_id: uuid.UUID) -> None:
        team = self.get_team(team_id)
        team.delete()
        logger.info(f"Team {team_id} deleted")

    # =========================================================================
    # MEMBERSHIP
    # =========================================================================

    def _ensure_org_members(self, organization_id, user_ids):
        user_ids = [uuid.UUID(str(uid)) for uid in user_ids]
        active = set(
            OrganizationMember.objects.filter(
                organization_id=organization_id,
                user_id__in=user_ids,
                is_active=True,
            ).values_list('user_id', flat=True)
        )
        missing = [uid for uid in user_ids if uid not in active]
        if missing:
            raise TeamAssignmentException(
                "All team members must be active members of the team's organization."
            )

    @transaction.atomic
    def add_members(self, team_id: uuid.UUID, user_ids: Iterable[uuid.UUID]) -> List[TeamMembership]:
        team = self.get_team(team_id)
        user_ids = list(dict.fromkeys(user_ids))
        self._ensure_org_members(team.organization_id, user_ids)

        memberships = [
            TeamMembership.objects.get_or_create(team=team, user_id=user_id)[0]
            for user_id in user_ids
        ]
        logger.info(f"Added {len(memberships)} member(s) to team {team.id}")
        return memberships

    def remove_member(self, team_id: uuid.UUID, user_id: uuid.UUID) -> None:
        deleted, _ = TeamMembership.objects.filter(team_id=team_id, user_id=user_id).delete()
        if not deleted:
            raise NotFoundException("Team membership not found.")

    @transaction.atomic
    def assign_patient_to_team(
        self,
        user_id: uuid.UUID,
        target_team_id: Optional[uuid.UUID] = None,
        source_team_id: Optional[uuid.UUID] = None,
    ) -> Optional[TeamMembership]:
        """
        Move a patient between teams.

        Args:
            user_id: Patient being moved
            target_team_id: Destination team, or None to unassign
            source_team_id: Team the patient is dragged from, if any

        Returns:
            The membership in the target team, or None when unassigned
        """
        if target_team_id is None and source_team_id is None:
            raise ValidationFailedException("A source or target team is required.")

        source = self.get_team(source_team_id) if source_team_id else None

        if target_team_id is None:
            TeamMembership.objects.filter(team=source, user_id=user_id).delete()
            logger.info(f"User {user_id} unassigned from team {source.id}")
            return None

        target = self.get_team(target_team_id)
        if source is not None and source.organization_id != target.organization_id:
            raise TeamAssignmentException("Patients cannot be moved between organizations.")
        self._ensure_org_members(target.organization_id, [user_id])

        if source is not None:
            stale = TeamMembership.objects.filter(team=source, user_id=user_id)
        else:
            stale = TeamMembership.objects.filter(
                team__organization_id=target.organization_id,
                user_id=user_id,
            )
        stale.exclude(team=target).delete()

        membership, created = TeamMembership.objects.get_or_create(team=target, user_id=user_id)
        if created:
            logger.info(f"User {user_id} moved to team {target.id}")
        return membership
