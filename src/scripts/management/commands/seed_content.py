"""Seed demo users and articles through the same services the API uses."""

from django.core.management.base import BaseCommand

from articles.models import Article
from articles.services import ArticleService
from authentication.directory import UserDirectory
from authentication.models import Role, User

DEMO_PASSWORD = "WildPass123"

DEMO_USERS = {
    "admin": ("admin@example.com", "Site Admin"),
    "contributor": ("ranger@example.com", "Field Ranger"),
    "pending": ("newcomer@example.com", "New Volunteer"),
}

DEMO_ARTICLES = [
    {
        "title": "Elephants of the Serengeti",
        "excerpt": "How herds move across the plains through the dry season.",
        "content": "Long-form field notes on elephant migration corridors.",
        "category": "Mammals",
        "tags": ["elephants", "savanna", "migration"],
        "published": True,
        "featured": True,
    },
    {
        "title": "Coral Reef Restoration",
        "excerpt": "Volunteers replant coral fragments on damaged reefs.",
        "content": "A season of nursery work on the outer reef.",
        "category": "Marine",
        "tags": ["coral", "oceans"],
        "published": True,
    },
    {
        "title": "Snow Leopard Survey Notes",
        "excerpt": "Draft notes from camera traps in the high valleys.",
        "category": "Mammals",
        "tags": ["leopards", "mountains"],
        "published": False,
    },
]


def create_seed_users(password: str = DEMO_PASSWORD) -> dict[str, User]:
    """Create the admin, an approved contributor and a pending contributor."""
    directory = UserDirectory()
    users: dict[str, User] = {}

    admin_email, admin_name = DEMO_USERS["admin"]
    admin = User.objects.filter(email=admin_email).first()
    if admin is None:
        if User.objects.filter(role=Role.ADMIN).exists():
            admin = User.objects.filter(role=Role.ADMIN).order_by("id").first()
        else:
            admin = directory.bootstrap_admin(admin_email, admin_name, password).user
    users["admin"] = admin

    for key in ("contributor", "pending"):
        email, name = DEMO_USERS[key]
        user = User.objects.filter(email=email).first() or directory.register(email, name, password)
        users[key] = user

    users["contributor"] = directory.approve(users["contributor"].id)
    return users


def create_seed_articles(owner: User) -> list[Article]:
    """Create the demo articles for ``owner`` unless a title already exists."""
    service = ArticleService()
    articles = []
    for fields in DEMO_ARTICLES:
        existing = Article.objects.filter(owner=owner, title=fields["title"]).first()
        articles.append(existing or service.create(owner, fields))
    return articles


class Command(BaseCommand):
    """Management command to seed demo users and articles."""

    help = (
        "Seed a bootstrap admin, contributors, and sample articles. "
        "Use --reset to clear previously seeded data first."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete the demo users and their articles before seeding.",
        )

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        if options.get("reset"):
            self._reset_seeded_data()

        self.stdout.write("Seeding demo content...")
        users = create_seed_users()
        articles = create_seed_articles(users["contributor"])
        self.stdout.write(
            self.style.SUCCESS(
                f"Seed completed: {len(users)} users, {len(articles)} articles "
                f"(password for demo accounts: {DEMO_PASSWORD})."
            )
        )

    def _reset_seeded_data(self) -> None:
        """Remove demo users and the articles they own."""
        self.stdout.write("Resetting previously seeded data...")
        emails = [email for email, _ in DEMO_USERS.values()]
        Article.objects.filter(owner__email__in=emails).delete()
        User.objects.filter(email__in=emails).delete()
        self.stdout.write(self.style.WARNING("Seeded data cleared."))


__all__ = ["Command", "create_seed_users", "create_seed_articles"]
