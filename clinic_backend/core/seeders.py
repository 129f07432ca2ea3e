from django.contrib.auth import get_user_model
from django.db import transaction

from .models import AuditLog, Role, RoleName

User = get_user_model()

ROLE_DEFINITIONS = RoleName.choices

SEED_EMAIL_DOMAIN = "@seed.local"


def seed_core(flush: bool = False) -> dict:
    """
    Seeds:
    - roles
    - one superuser (only if none exists)
    - one account per therapist

    When flush=True:
        - deletes audit logs
        - deletes users whose email ends with '@seed.local' (never superusers)
    """
    stats: dict[str, int] = {}

    with transaction.atomic():
        if flush:
            AuditLog.objects.all().delete()
            User.objects.filter(is_superuser=False, email__endswith=SEED_EMAIL_DOMAIN).delete()

        roles = _seed_roles()
        stats["core_roles"] = len(roles)

        users = _seed_users({r.name: r for r in roles})
        stats["core_users"] = len(users)

    return stats


def _seed_roles() -> list[Role]:
    roles: list[Role] = []
    for name, label in ROLE_DEFINITIONS:
        role, _created = Role.objects.get_or_create(name=name, defaults={"label": label})
        roles.append(role)
    return roles


def _seed_users(roles: dict[str, Role]) -> list[User]:
    users: list[User] = []

    if not User.objects.filter(is_superuser=True).exists():
        su = User.objects.create_superuser(
            username="admin",
            email="admin@clinic.local",
            password="admin",
        )
        su.role = roles["admin"]
        su.save(update_fields=["role"])
        users.append(su)

    for username, first_name, last_name, role_name in [
        ("therapist1", "Noa", "Levi", "therapist"),
        ("therapist2", "Daniel", "Cohen", "therapist"),
        ("assistant1", "Maya", "Peretz", "assistant"),
        ("billing1", "Yossi", "Mizrahi", "billing"),
    ]:
        user, created = User.objects.get_or_create(
            username=username,
            defaults={
                "email": f"{username}{SEED_EMAIL_DOMAIN}",
                "first_name": first_name,
                "last_name": last_name,
            },
        )
        if created:
            user.set_password("test1234")
        user.role = roles[role_name]
        user.save()
        users.append(user)

    return users
