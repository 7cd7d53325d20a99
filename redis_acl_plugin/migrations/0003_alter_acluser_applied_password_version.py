from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("redis_acl_plugin", "0002_schedule_consistency_check"),
    ]

    operations = [
        migrations.AlterField(
            model_name="acluser",
            name="applied_password_version",
            field=models.CharField(
                blank=True, default=None, editable=False, max_length=255, null=True
            ),
        ),
    ]
