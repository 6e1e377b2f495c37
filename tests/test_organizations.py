# tests/test_organizations.py

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from core.exceptions import (
    NotFoundException,
    TeamAssignmentException,
    ValidationFailedException,
)
from core.permissions import is_super_admin, managed_organization_ids
from organizations.models import OrganizationMember, TeamMembership
from organizations.services.organization_service import OrganizationService
from organizations.services.team_service import TeamService
from tests.factories import make_member, make_organization, make_staff, make_team, make_user


# ════════════════════════════════════════════════════════════════════
# ORGANIZATIONS AND SUPER ADMINS
# ════════════════════════════════════════════════════════════════════

class OrganizationServiceTests(TestCase):

    def setUp(self):
        self.service = OrganizationService()
        self.organization = make_organization()

    def test_name_is_required(self):
        with self.assertRaises(ValidationFailedException):
            self.service.create_organization("   ")

    def test_add_members_reactivates(self):
        user = make_user()
        OrganizationMember.objects.create(organization=self.organization, user=user, is_active=False)
        memberships = self.service.add_members(self.organization.id, [user.id, user.id])
        self.assertEqual(len(memberships), 1)
        self.assertTrue(memberships[0].is_active)
        self.assertEqual(OrganizationMember.objects.filter(user=user).count(), 1)

    def test_add_unknown_user(self):
        with self.assertRaises(NotFoundException):
            self.service.add_members(self.organization.id, ["7d0b6e8e-7c55-4b4f-9d7b-1d8f0b7d1c11"])

    def test_add_with_unknown_role(self):
        with self.assertRaises(ValidationFailedException):
            self.service.add_members(self.organization.id, [make_user().id], role="owner")

    def test_member_count_ignores_inactive(self):
        make_member(self.organization)
        inactive = make_member(self.organization)
        OrganizationMember.objects.filter(user=inactive).update(is_active=False)
        organization = self.service.list_organizations().get(id=self.organization.id)
        self.assertEqual(organization.members_count, 1)

    def test_super_admin_grant_and_revoke(self):
        root = make_organization("Head office", is_super_admin=True)
        user = make_user()

        membership = self.service.make_super_admin(user.id)
        self.assertEqual(membership.organization, root)
        self.assertTrue(is_super_admin(user))
        self.assertIsNone(managed_organization_ids(user))

        self.service.revoke_super_admin(user.id)
        self.assertFalse(is_super_admin(user))
        with self.assertRaises(NotFoundException):
            self.service.revoke_super_admin(user.id)

    def test_super_admin_needs_root_organization(self):
        with self.assertRaises(NotFoundException):
            self.service.make_super_admin(make_user().id)

    def test_managed_organizations_of_admin(self):
        admin = make_member(self.organization, role=OrganizationMember.Role.ADMIN)
        make_member(make_organization("Other"), user=admin, role=OrganizationMember.Role.PATIENT)
        self.assertEqual(managed_organization_ids(admin), [self.organization.id])


# ════════════════════════════════════════════════════════════════════
# TEAMS
# ════════════════════════════════════════════════════════════════════

class TeamAssignmentTests(TestCase):

    def setUp(self):
        self.service = TeamService()
        self.organization = make_organization()
        self.team_a = make_team(self.organization, "A")
        self.team_b = make_team(self.organization, "B")
        self.patient = make_member(self.organization)

    def test_move_between_teams(self):
        TeamMembership.objects.create(team=self.team_a, user=self.patient)
        membership = self.service.assign_patient_to_team(
            self.patient.id, target_team_id=self.team_b.id, source_team_id=self.team_a.id
        )
        self.assertEqual(membership.team, self.team_b)
        self.assertFalse(TeamMembership.objects.filter(team=self.team_a, user=self.patient).exists())

    def test_assign_without_source_leaves_single_team(self):
        TeamMembership.objects.create(team=self.team_a, user=self.patient)
        self.service.assign_patient_to_team(self.patient.id, target_team_id=self.team_b.id)
        teams = list(TeamMembership.objects.filter(user=self.patient).values_list("team_id", flat=True))
        self.assertEqual(teams, [self.team_b.id])

    def test_assign_twice_is_idempotent(self):
        self.service.assign_patient_to_team(self.patient.id, target_team_id=self.team_a.id)
        self.service.assign_patient_to_team(self.patient.id, target_team_id=self.team_a.id)
        self.assertEqual(TeamMembership.objects.filter(user=self.patient).count(), 1)

    def test_unassign(self):
        TeamMembership.objects.create(team=self.team_a, user=self.patient)
        result = self.service.assign_patient_to_team(self.patient.id, source_team_id=self.team_a.id)
        self.assertIsNone(result)
        self.assertFalse(TeamMembership.objects.filter(user=self.patient).exists())

    def test_source_or_target_required(self):
        with self.assertRaises(ValidationFailedException):
            self.service.assign_patient_to_team(self.patient.id)

    def test_cross_organization_move_rejected(self):
        other_team = make_team(make_organization("Other"), "C")
        with self.assertRaises(TeamAssignmentException):
            self.service.assign_patient_to_team(
                self.patient.id, target_team_id=other_team.id, source_team_id=self.team_a.id
            )

    def test_outsider_cannot_join(self):
        with self.assertRaises(TeamAssignmentException):
            self.service.assign_patient_to_team(make_user().id, target_team_id=self.team_a.id)

    def test_team_name_required(self):
        with self.assertRaises(ValidationFailedException):
            self.service.create_team(self.organization.id, " ")

    def test_member_count(self):
        self.service.add_members(self.team_a.id, [self.patient.id])
        team = self.service.list_teams(self.organization.id).get(id=self.team_a.id)
        self.assertEqual(team.member_count, 1)


class OrganizationApiTests(TestCase):

    def setUp(self):
        self.organization = make_organization()
        self.admin = make_member(self.organization, role=OrganizationMember.Role.ADMIN)
        self.client = APIClient()
        self.client.force_authenticate(self.admin)

    def test_org_admin_can_list(self):
        response = self.client.get(reverse("organizations:organization-list"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data[0]["members_count"], 1)

    def test_org_admin_cannot_create_organization(self):
        response = self.client.post(reverse("organizations:organization-list"), {"name": "New"}, format="json")
        self.assertEqual(response.status_code, 403)

    def test_staff_creates_team_and_assigns(self):
        client = APIClient()
        client.force_authenticate(make_staff())
        patient = make_member(self.organization)

        response = client.post(
            reverse("organizations:team-list", args=[self.organization.id]),
            {"name": "Shoulders"},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        team_id = response.data["id"]

        response = client.post(
            reverse("organizations:team-assign"),
            {"user_id": str(patient.id), "target_team_id": team_id},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["team_id"], team_id)

    def test_team_assign_error_shape(self):
        response = self.client.post(
            reverse("organizations:team-assign"),
            {"user_id": str(make_user().id), "target_team_id": str(make_team(self.organization).id)},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error_code"], "team_assignment_error")
        self.assertFalse(response.data["success"])
