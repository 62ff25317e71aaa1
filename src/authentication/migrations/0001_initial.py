import authentication.managers
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("name", models.CharField(max_length=100)),
                ("password_hash", models.CharField(max_length=128)),
                (
                    "role",
                    models.CharField(
                        choices=[("ADMIN", "Admin"), ("CONTRIBUTOR", "Contributor")],
                        default="CONTRIBUTOR",
                        max_length=20,
                    ),
                ),
                ("approved", models.BooleanField(default=False)),
                ("enabled", models.BooleanField(default=True)),
                ("bio", models.TextField(blank=True)),
                ("profile_picture_url", models.URLField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["role"], name="user_role_idx"),
                    models.Index(fields=["approved"], name="user_approved_idx"),
                ],
            },
            managers=[
                ("objects", authentication.managers.UserManager()),
            ],
        ),
    ]
