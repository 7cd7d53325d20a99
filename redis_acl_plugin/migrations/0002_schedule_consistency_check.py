from django.db import migrations


def add_acl_consistency_check_task(apps, schema_editor):
    Schedule = apps.get_model("django_q", "Schedule")
    Schedule.objects.update_or_create(
        name="Check Redis ACL Consistency",
        func="redis_acl_plugin.tasks.check_acl_consistency",
        schedule_type="D",
    )


def remove_acl_consistency_check_task(apps, schema_editor):
    Schedule = apps.get_model("django_q", "Schedule")
    Schedule.objects.filter(name="Check Redis ACL Consistency").delete()


class Migration(migrations.Migration):

    dependencies = [
        ("redis_acl_plugin", "0001_initial"),
        ("django_q", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(
            add_acl_consistency_check_task, remove_acl_consistency_check_task
        ),
    ]
