from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("accounts", "0001_initial"),
        ("ministry", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="user",
            name="classes",
            field=models.ManyToManyField(blank=True, related_name="staff", to="ministry.classroom"),
        ),
    ]
