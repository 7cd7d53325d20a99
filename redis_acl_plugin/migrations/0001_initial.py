from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ACLUser",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=255, unique=True)),
                ("enabled", models.BooleanField(default=True)),
                ("password_version", models.CharField(blank=True, max_length=255)),
                (
                    "applied_password_version",
                    models.CharField(blank=True, editable=False, max_length=255),
                ),
                ("categories", models.JSONField(blank=True, default=list)),
                ("commands", models.JSONField(blank=True, default=list)),
                ("excluded_commands", models.JSONField(blank=True, default=list)),
                ("keys", models.JSONField(blank=True, default=list)),
                ("readonly_keys", models.JSONField(blank=True, default=list)),
                ("writeonly_keys", models.JSONField(blank=True, default=list)),
                ("channels", models.JSONField(blank=True, default=list)),
                ("acl_save", models.BooleanField(default=True)),
            ],
        ),
    ]
