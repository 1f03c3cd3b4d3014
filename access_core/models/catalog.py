"""Default permission catalog and role definitions for the platform."""

from __future__ import annotations

from typing import Dict, List, NamedTuple, Union

from access_core.models.permission import PermissionModule

SUPER_ADMIN_ROLE = "Super Admin"
ADMIN_ROLE = "Admin"
AGENT_ROLE = "Agent"
USER_ROLE = "User"

# Names that may not be renamed or deleted through the admin API.
PROTECTED_ROLE_NAMES = frozenset({SUPER_ADMIN_ROLE, ADMIN_ROLE, AGENT_ROLE, USER_ROLE})

ALL_PERMISSIONS = "all"


class PermissionSpec(NamedTuple):
    name: str
    code: str
    module: PermissionModule
    description: str


class RoleSpec(NamedTuple):
    name: str
    description: str
    permissions: Union[List[str], str]  # codes, or ALL_PERMISSIONS


_M = PermissionModule

DEFAULT_PERMISSIONS: List[PermissionSpec] = [
    # Dashboard
    PermissionSpec("View Dashboard", "dashboard.view", _M.DASHBOARD, "View dashboard and analytics"),
    PermissionSpec("View Statistics", "dashboard.stats", _M.DASHBOARD, "View detailed statistics and charts"),
    # Agencies
    PermissionSpec("View Agencies", "agencies.view", _M.USERS, "View registered agencies"),
    PermissionSpec("Approve Agency", "agencies.approve", _M.USERS, "Approve/activate agencies"),
    PermissionSpec("Edit Agency", "agencies.edit", _M.USERS, "Edit agency details and settings"),
    PermissionSpec("Delete Agency", "agencies.delete", _M.USERS, "Delete agencies"),
    PermissionSpec("View Agency Details", "agencies.details", _M.USERS, "View detailed agency information"),
    # Bookings
    PermissionSpec("View Bookings", "bookings.view", _M.BOOKINGS, "View all bookings"),
    PermissionSpec("View Booking Details", "bookings.details", _M.BOOKINGS, "View detailed booking information"),
    PermissionSpec("Edit Booking", "bookings.edit", _M.BOOKINGS, "Edit existing bookings"),
    PermissionSpec("Delete Booking", "bookings.delete", _M.BOOKINGS, "Delete bookings"),
    PermissionSpec("Approve Booking", "bookings.approve", _M.BOOKINGS, "Approve pending bookings"),
    PermissionSpec("Cancel Booking", "bookings.cancel", _M.BOOKINGS, "Cancel bookings"),
    # Group ticketing
    PermissionSpec("View Groups", "groups.view", _M.BOOKINGS, "View group ticketing"),
    PermissionSpec("Create Group", "groups.create", _M.BOOKINGS, "Create new group tickets"),
    PermissionSpec("Edit Group", "groups.edit", _M.BOOKINGS, "Edit group tickets"),
    PermissionSpec("Delete Group", "groups.delete", _M.BOOKINGS, "Delete group tickets"),
    # Payments / ledger
    PermissionSpec("View Accounts", "ledger.view", _M.PAYMENTS, "View ledger accounts"),
    PermissionSpec("View Payment Vouchers", "payments.view", _M.PAYMENTS, "View payment vouchers"),
    PermissionSpec("Create Payment", "payments.create", _M.PAYMENTS, "Create payment vouchers"),
    PermissionSpec("Edit Payment", "payments.edit", _M.PAYMENTS, "Edit payment vouchers"),
    PermissionSpec("Delete Payment", "payments.delete", _M.PAYMENTS, "Delete payment vouchers"),
    PermissionSpec("Approve Payment", "payments.approve", _M.PAYMENTS, "Approve payment vouchers"),
    # Airlines
    PermissionSpec("View Airlines", "airlines.view", _M.AIRLINES, "View airlines list"),
    PermissionSpec("Add Airline", "airlines.create", _M.AIRLINES, "Add new airlines"),
    PermissionSpec("Edit Airline", "airlines.edit", _M.AIRLINES, "Edit airline details"),
    PermissionSpec("Delete Airline", "airlines.delete", _M.AIRLINES, "Delete airlines"),
    # Banks
    PermissionSpec("View Banks", "banks.view", _M.BANKS, "View bank accounts"),
    PermissionSpec("Add Bank", "banks.create", _M.BANKS, "Add new banks"),
    PermissionSpec("Edit Bank", "banks.edit", _M.BANKS, "Edit bank details"),
    PermissionSpec("Delete Bank", "banks.delete", _M.BANKS, "Delete banks"),
    # Sectors
    PermissionSpec("View Sectors", "sectors.view", _M.SECTORS, "View flight sectors"),
    PermissionSpec("Add Sector", "sectors.create", _M.SECTORS, "Add new sectors"),
    PermissionSpec("Edit Sector", "sectors.edit", _M.SECTORS, "Edit sector details"),
    PermissionSpec("Delete Sector", "sectors.delete", _M.SECTORS, "Delete sectors"),
    # Reports
    PermissionSpec("View Reports", "reports.view", _M.REPORTS, "View and generate reports"),
    PermissionSpec("Export Reports", "reports.export", _M.REPORTS, "Export reports to Excel/PDF"),
    # Settings & system
    PermissionSpec("Manage Roles", "settings.roles", _M.SETTINGS, "Manage roles and permissions"),
    PermissionSpec("Manage Permissions", "settings.permissions", _M.SETTINGS, "Manage system permissions"),
    PermissionSpec("System Settings", "settings.system", _M.SETTINGS, "Manage system settings"),
    PermissionSpec("Send Emails", "system.email", _M.SETTINGS, "Send system emails"),
]

DEFAULT_ROLES: List[RoleSpec] = [
    RoleSpec(SUPER_ADMIN_ROLE, "Full system access with all permissions", ALL_PERMISSIONS),
    RoleSpec(
        ADMIN_ROLE,
        "Full administrative access except role management",
        [
            "dashboard.view", "dashboard.stats",
            "agencies.view", "agencies.approve", "agencies.edit", "agencies.details",
            "bookings.view", "bookings.details", "bookings.edit", "bookings.approve", "bookings.cancel",
            "groups.view", "groups.create", "groups.edit", "groups.delete",
            "ledger.view", "payments.view", "payments.create", "payments.edit", "payments.approve",
            "airlines.view", "airlines.create", "airlines.edit", "airlines.delete",
            "banks.view", "banks.create", "banks.edit", "banks.delete",
            "sectors.view", "sectors.create", "sectors.edit", "sectors.delete",
            "reports.view", "reports.export",
        ],
    ),
    RoleSpec(
        "Operations Manager",
        "Manage bookings, payments, and approvals",
        [
            "dashboard.view", "dashboard.stats",
            "agencies.view", "agencies.approve", "agencies.details",
            "bookings.view", "bookings.details", "bookings.edit", "bookings.approve", "bookings.cancel",
            "groups.view", "groups.create", "groups.edit",
            "ledger.view", "payments.view", "payments.approve",
            "airlines.view", "banks.view", "sectors.view",
            "reports.view", "reports.export",
        ],
    ),
    RoleSpec(
        "Booking Manager",
        "Manage bookings and group ticketing",
        [
            "dashboard.view",
            "agencies.view", "agencies.details",
            "bookings.view", "bookings.details", "bookings.edit",
            "groups.view", "groups.create", "groups.edit",
            "airlines.view", "banks.view", "sectors.view",
            "reports.view",
        ],
    ),
    RoleSpec(
        "Finance Manager",
        "Manage payments, ledger, and financial reports",
        [
            "dashboard.view", "dashboard.stats",
            "agencies.view", "agencies.details",
            "bookings.view", "bookings.details",
            "ledger.view", "payments.view", "payments.create", "payments.edit", "payments.approve",
            "banks.view",
            "reports.view", "reports.export",
        ],
    ),
    RoleSpec(
        "Support Staff",
        "View-only access for customer support",
        [
            "dashboard.view",
            "agencies.view", "agencies.details",
            "bookings.view", "bookings.details",
            "groups.view",
            "ledger.view", "payments.view",
            "airlines.view", "banks.view", "sectors.view",
        ],
    ),
    RoleSpec(
        "Data Manager",
        "Manage airlines, banks, and sectors configuration",
        [
            "dashboard.view",
            "airlines.view", "airlines.create", "airlines.edit", "airlines.delete",
            "banks.view", "banks.create", "banks.edit", "banks.delete",
            "sectors.view", "sectors.create", "sectors.edit", "sectors.delete",
        ],
    ),
    RoleSpec(
        AGENT_ROLE,
        "Travel agent with limited admin access",
        [
            "dashboard.view",
            "bookings.view", "bookings.details",
            "groups.view",
            "payments.view",
            "airlines.view", "banks.view", "sectors.view",
        ],
    ),
]


def get_all_permission_codes() -> List[str]:
    """Return every default permission code in catalog order."""
    return [spec.code for spec in DEFAULT_PERMISSIONS]


def get_role_permission_map() -> Dict[str, List[str]]:
    """Return role name -> permission codes with the wildcard expanded."""
    all_codes = get_all_permission_codes()
    return {
        spec.name: list(all_codes) if spec.permissions == ALL_PERMISSIONS else list(spec.permissions)
        for spec in DEFAULT_ROLES
    }
