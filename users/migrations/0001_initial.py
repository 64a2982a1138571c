from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('uid', models.CharField(max_length=128, primary_key=True, serialize=False)),
                ('email', models.EmailField(max_length=255, unique=True)),
                ('name', models.CharField(blank=True, default='', max_length=120)),
                ('photo_url', models.URLField(blank=True, default='', max_length=500)),
                ('role', models.CharField(choices=[('user', 'user'), ('staff', 'staff'), ('admin', 'admin')], db_index=True, default='user', max_length=10)),
                ('phone', models.CharField(blank=True, default='', max_length=32)),
                ('address', models.JSONField(blank=True, default=dict)),
                ('preferences', models.JSONField(blank=True, default=dict)),
                ('email_verified', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('last_login_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'db_table': 'users',
                'ordering': ('-created_at',),
            },
        ),
    ]
