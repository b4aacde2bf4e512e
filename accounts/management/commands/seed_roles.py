from __future__ import annotations

from typing import Dict, Iterable, List

from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group, Permission
from django.contrib.contenttypes.models import ContentType

from core.permissions import ALL_ROLES, ROLE_MANAGER, ROLE_CASHIER, ROLE_KITCHEN


def ensure_group(name: str) -> Group:
    g, _ = Group.objects.get_or_create(name=name)
    return g


def model_perms(app_label: str, model: str, actions: Iterable[str]) -> List[Permission]:
    ct = ContentType.objects.get(app_label=app_label, model=model)
    codenames = [f"{action}_{model}" for action in actions]
    return list(Permission.objects.filter(content_type=ct, codename__in=codenames))


def seed_permissions() -> Dict[str, Group]:
    groups = {name: ensure_group(name) for name in ALL_ROLES}

    # Kitchen drives ready/collected, Cashier also accepts and rejects
    grants = {
        ROLE_MANAGER: ("view", "add", "change", "delete"),
        ROLE_CASHIER: ("view", "change"),
        ROLE_KITCHEN: ("view", "change"),
    }
    for role, actions in grants.items():
        for m in ("order", "orderitem"):
            groups[role].permissions.add(*model_perms("orders", m, actions))
    return groups


class Command(BaseCommand):
    help = "Seed order admin roles (Groups) and optional demo users: Manager, Cashier, Kitchen."

    def add_arguments(self, parser):
        parser.add_argument("--create-users", action="store_true", help="Also create demo users and assign roles")
        parser.add_argument("--password", type=str, default="ChangeMe123!", help="Password to set for all demo users")

    def handle(self, *args, **options):
        groups = seed_permissions()
        self.stdout.write(self.style.SUCCESS("Groups and permissions seeded."))

        if not options["create_users"]:
            return

        User = get_user_model()
        password = options["password"]
        for role in ALL_ROLES:
            username = role.lower()
            user, created = User.objects.get_or_create(
                username=username,
                defaults={"email": f"{username}@example.com"},
            )
            if created:
                user.set_password(password)
                user.save()
            user.groups.add(groups[role])
            self.stdout.write(self.style.SUCCESS(f"User '{username}' in group '{role}'"))
        self.stdout.write(self.style.WARNING(f"Demo users created with password: {password}"))
