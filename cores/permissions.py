from rest_framework import permissions

ADMIN = "admin"
EVALUATOR = "evaluator"
SUPERVISOR = "supervisor"
CANDIDATE = "candidate"

STAFF = frozenset({ADMIN, EVALUATOR, SUPERVISOR})
WRITERS = frozenset({ADMIN, EVALUATOR})
EVERYONE = STAFF | {CANDIDATE}

# operation name -> roles allowed to run it
CAPABILITIES = {
    "candidates.create": WRITERS,
    "candidates.list": STAFF,
    "candidates.retrieve": EVERYONE,
    "candidates.update": WRITERS,
    "candidates.partial_update": WRITERS,
    "candidates.destroy": frozenset({ADMIN}),

    "tests.create": WRITERS,
    "tests.list": EVERYONE,
    "tests.retrieve": EVERYONE,
    "tests.by_type": EVERYONE,
    "tests.update": WRITERS,
    "tests.partial_update": WRITERS,
    "tests.destroy": frozenset({ADMIN}),

    "sessions.create": WRITERS,
    "sessions.list": EVERYONE,
    "sessions.retrieve": EVERYONE,
    "sessions.start": EVERYONE,
    "sessions.answer": EVERYONE,
    "sessions.submit": EVERYONE,

    "results.generate": WRITERS,
    "results.list": EVERYONE,
    "results.retrieve": EVERYONE,
    "results.by_candidate": EVERYONE,

    "analytics.dashboard": STAFF,
    "analytics.test_performance": STAFF,
    "reports.candidate": STAFF,

    "audit.list": frozenset({ADMIN}),
}


def is_allowed(role, operation):
    """Capability check: may a subject with `role` run `operation`?"""
    return role in CAPABILITIES.get(operation, frozenset())


def resolve_operation(view):
    operation = getattr(view, "operation", None)
    if operation:
        return operation
    prefix = getattr(view, "capability_prefix", None)
    action = getattr(view, "action", None)
    if prefix and action:
        return f"{prefix}.{action}"
    return None


def is_staff_user(user):
    return bool(user.is_superuser or getattr(user, "role", "") in STAFF)


class HasCapability(permissions.BasePermission):
    """
    Looks the view's operation up in CAPABILITIES.
    Views declare either `operation` or `capability_prefix` (combined with the viewset action).
    """
    message = "You do not have permission to perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True
        operation = resolve_operation(view)
        if operation is None:
            # metadata (OPTIONS) and other framework actions
            return request.method in permissions.SAFE_METHODS
        return is_allowed(getattr(user, "role", ""), operation)


class IsOwnerOrStaff(permissions.BasePermission):
    """Candidates may only touch objects linked to their own candidate record."""

    def has_object_permission(self, request, view, obj):
        if is_staff_user(request.user):
            return True
        candidate = getattr(obj, "candidate", obj)
        return candidate.user_id == request.user.id
