# FILE: medvanta/backend/core/permissions.py

"""
CUSTOM PERMISSIONS

Reusable permission classes for API views.
"""

from rest_framework.permissions import BasePermission


def is_super_admin(user):
    """True when the user holds an active admin seat in the super admin organization."""
    if not (user and user.is_authenticated):
        return False
    from organizations.models import OrganizationMember

    return OrganizationMember.objects.filter(
        user=user,
        organization__is_super_admin=True,
        is_active=True,
    ).exists()


def managed_organization_ids(user):
    """
    Organizations the user administers.

    Returns None for staff and super admins, meaning every organization.
    """
    if user.is_staff or is_super_admin(user):
        return None
    from organizations.models import OrganizationMember

    return list(
        OrganizationMember.objects.filter(
            user=user,
            role=OrganizationMember.Role.ADMIN,
            is_active=True,
        ).values_list("organization_id", flat=True)
    )


class IsClinicAdmin(BasePermission):
    """
    Permission check for clinic staff.

    Staff users, super admins and active organization admins pass.
    """

    message = "Only clinic administrators can access this section."

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if user.is_staff:
            return True
        from organizations.models import OrganizationMember

        return OrganizationMember.objects.filter(
            user=user,
            role=OrganizationMember.Role.ADMIN,
            is_active=True,
        ).exists()


class IsSuperAdmin(BasePermission):
    """
    Permission check for super admins.
    """

    message = "Only super administrators can access this section."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and (user.is_superuser or is_super_admin(user)))
