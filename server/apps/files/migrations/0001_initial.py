import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='UserQuota',
            fields=[
                ('user', models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE,
                    primary_key=True,
                    related_name='quota',
                    serialize=False,
                    to=settings.AUTH_USER_MODEL,
                )),
                ('storage_limit', models.BigIntegerField(
                    help_text='Storage quota limit in bytes',
                )),
                ('storage_used', models.BigIntegerField(
                    default=0,
                    help_text='Currently accounted storage in bytes',
                )),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'User Quota',
                'verbose_name_plural': 'User Quotas',
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(storage_limit__gte=0),
                        name='storage_limit_non_negative',
                    ),
                    models.CheckConstraint(
                        condition=models.Q(storage_used__gte=0),
                        name='storage_used_non_negative',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='File',
            fields=[
                ('id', models.BigAutoField(
                    auto_created=True,
                    primary_key=True,
                    serialize=False,
                    verbose_name='ID',
                )),
                ('name', models.CharField(
                    help_text='Display name, unique per owner',
                    max_length=255,
                )),
                ('blob', models.FileField(
                    help_text='Internal storage name: {username}/{name}',
                    max_length=512,
                    upload_to='',
                )),
                ('size_bytes', models.BigIntegerField(
                    help_text='Bytes actually persisted in the blob store',
                )),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='files',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'File',
                'verbose_name_plural': 'Files',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(
                        fields=['user', '-created_at'],
                        name='files_user_recent_idx',
                    ),
                ],
                'constraints': [
                    models.UniqueConstraint(
                        fields=('user', 'name'),
                        name='files_user_name_unique',
                    ),
                ],
            },
        ),
    ]
