from django.core.management.base import BaseCommand

from vouchers.services import VoucherService


class Command(BaseCommand):
    help = "Create the default demo vouchers (existing codes are left untouched)."

    def handle(self, *args, **options):
        created = VoucherService.seed_default_vouchers()
        if created:
            self.stdout.write(self.style.SUCCESS(f"Created vouchers: {', '.join(created)}"))
        else:
            self.stdout.write("All default vouchers already exist.")
