"""
seed_demo_shop.py
-----------------
Seeds (creates or updates) a demo barbershop: the organization, an owner with a
dashboard login, two barbers, a small service catalog, weekly schedules
(Mon-Sat 09:00-17:00) and the staff/service assignments.
Safe to run repeatedly; rows are upserted by slug / name.

Usage:
    python manage.py seed_demo_shop [--slug demo-barbers] [--timezone Europe/Istanbul]
"""

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from booking.models import Organization, Service, Staff, StaffService, validate_timezone_name
from staff.models import WeeklySchedule

CATALOG = [
    {"name": "Classic Haircut", "description": "Scissor or clipper cut", "duration_minutes": 30, "price_cents": 2500},
    {"name": "Beard Trim", "description": "Shape and line-up", "duration_minutes": 15, "price_cents": 1200},
    {"name": "Haircut & Beard", "description": "Full service", "duration_minutes": 45, "price_cents": 3500},
    {"name": "Hot Towel Shave", "description": "Straight razor shave", "duration_minutes": 30, "price_cents": 3000},
    {"name": "Kids Cut", "description": "Under 12", "duration_minutes": 20, "price_cents": 1800},
]

BARBERS = [
    {"name": "Ali", "email": "ali@example.com", "services": ["Classic Haircut", "Beard Trim", "Haircut & Beard"]},
    {"name": "Sam", "email": "sam@example.com", "services": ["Classic Haircut", "Hot Towel Shave", "Kids Cut"]},
]

# Monday .. Saturday (0 = Sunday)
WORKING_DAYS = [1, 2, 3, 4, 5, 6]


class Command(BaseCommand):
    help = "Seed or update a demo barbershop with staff, services and schedules."

    def add_arguments(self, parser):
        parser.add_argument("--slug", default="demo-barbers")
        parser.add_argument("--name", default="Demo Barbers")
        parser.add_argument("--timezone", default="")
        parser.add_argument("--owner-username", default="owner")
        parser.add_argument("--owner-password", default="owner-pass")

    @transaction.atomic
    def handle(self, *args, **options):
        if options["timezone"]:
            try:
                validate_timezone_name(options["timezone"])
            except ValidationError as exc:
                raise CommandError(exc.messages[0])

        organization, _ = Organization.objects.update_or_create(
            slug=options["slug"],
            defaults={"name": options["name"], "timezone": options["timezone"]},
        )

        User = get_user_model()
        user, user_created = User.objects.get_or_create(username=options["owner_username"])
        if user_created:
            user.set_password(options["owner_password"])
            user.save()
        Staff.objects.update_or_create(
            organization=organization,
            user=user,
            defaults={"name": "Owner", "role": Staff.ROLE_OWNER},
        )

        services = {}
        for item in CATALOG:
            service, _ = Service.objects.update_or_create(
                organization=organization,
                name=item["name"],
                defaults={**item, "is_active": True},
            )
            services[service.name] = service

        for barber in BARBERS:
            member, _ = Staff.objects.update_or_create(
                organization=organization,
                name=barber["name"],
                defaults={"email": barber["email"], "role": Staff.ROLE_MEMBER},
            )
            StaffService.objects.filter(staff=member).delete()
            StaffService.objects.bulk_create(
                [StaffService(staff=member, service=services[name]) for name in barber["services"]]
            )
            WeeklySchedule.objects.filter(staff=member).delete()
            WeeklySchedule.objects.bulk_create(
                [
                    WeeklySchedule(staff=member, day_of_week=day, start_time="09:00", end_time="17:00")
                    for day in WORKING_DAYS
                ]
            )

        self.stdout.write(
            self.style.SUCCESS(
                f"Seed complete. Shop={organization.slug}, Services={len(services)}, Barbers={len(BARBERS)}"
            )
        )
