from clinic_backend.core.permissions import RBACPermission


class SessionPermission(RBACPermission):
    """RBAC for therapy session endpoints.

    - admin, therapist, assistant: read + write (generation, merge check)
    - billing: read-only
    """

    read_roles = {"admin", "therapist", "assistant", "billing"}
    write_roles = {"admin", "therapist", "assistant"}


class MergeSuggestionPermission(RBACPermission):
    """The merge check writes nothing, but it is a POST; billing may not use it."""

    read_roles = {"admin", "therapist", "assistant"}
    write_roles = {"admin", "therapist", "assistant"}
