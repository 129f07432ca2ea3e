from clinic_backend.core.permissions import RBACPermission


class PatientPermission(RBACPermission):
    """RBAC for Patient endpoints.

    - admin, therapist, assistant: read + write
    - billing: read-only

    Querysets are additionally restricted to patients owned by the user.
    """

    read_roles = {"admin", "therapist", "assistant", "billing"}
    write_roles = {"admin", "therapist", "assistant"}
