"""Role to capability mapping.

Routes declare the capability they need instead of comparing role strings.
"""

from enum import StrEnum

from school_fees.core.auth.models import UserRole


class Capability(StrEnum):
    """Operations a role may be allowed to perform."""

    MANAGE_SCHOOLS = "manage_schools"
    MANAGE_PLANS = "manage_plans"
    VIEW_OWN_SCHOOL = "view_own_school"
    MANAGE_STUDENTS = "manage_students"
    MANAGE_FEES = "manage_fees"
    MANAGE_INVOICES = "manage_invoices"
    LINK_CHILDREN = "link_children"
    VIEW_CHILD_INVOICES = "view_child_invoices"
    PAY_INVOICES = "pay_invoices"
    CHANGE_OWN_PASSWORD = "change_own_password"


ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.SUPER_ADMIN: frozenset(
        {
            Capability.MANAGE_SCHOOLS,
            Capability.MANAGE_PLANS,
            Capability.CHANGE_OWN_PASSWORD,
        }
    ),
    UserRole.SCHOOL_ADMIN: frozenset(
        {
            Capability.VIEW_OWN_SCHOOL,
            Capability.MANAGE_STUDENTS,
            Capability.MANAGE_FEES,
            Capability.MANAGE_INVOICES,
            Capability.CHANGE_OWN_PASSWORD,
        }
    ),
    UserRole.PARENT: frozenset(
        {
            Capability.LINK_CHILDREN,
            Capability.VIEW_CHILD_INVOICES,
            Capability.PAY_INVOICES,
            Capability.CHANGE_OWN_PASSWORD,
        }
    ),
}


def role_can(role: UserRole | str, capability: Capability) -> bool:
    """Check whether a role holds a capability. Unknown roles hold none."""
    try:
        role = UserRole(role)
    except ValueError:
        return False
    return capability in ROLE_CAPABILITIES[role]
