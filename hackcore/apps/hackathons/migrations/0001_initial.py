from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Hackathon',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=160)),
                ('slug', models.SlugField(unique=True)),
                ('description', models.TextField(blank=True)),
                ('registration_start', models.DateTimeField(blank=True, null=True)),
                ('registration_end', models.DateTimeField(blank=True, null=True)),
                ('hacking_start', models.DateTimeField(blank=True, null=True)),
                ('hacking_end', models.DateTimeField(blank=True, null=True)),
                ('submission_deadline', models.DateTimeField(blank=True, null=True)),
                ('judging_start', models.DateTimeField(blank=True, null=True)),
                ('judging_end', models.DateTimeField(blank=True, null=True)),
                ('winners_announcement', models.DateTimeField(blank=True, null=True)),
                ('status', models.CharField(
                    choices=[
                        ('published', 'Published'),
                        ('draft', 'Draft'),
                        ('upcoming', 'Upcoming'),
                        ('registration-open', 'Registration open'),
                        ('registration-closed', 'Registration closed'),
                        ('hacking', 'Hacking'),
                        ('judging', 'Judging'),
                        ('completed', 'Completed'),
                        ('cancelled', 'Cancelled'),
                    ],
                    default='draft',
                    max_length=24,
                )),
                ('max_team_size', models.PositiveIntegerField(default=4)),
                ('team_count', models.PositiveIntegerField(default=0)),
                ('participant_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organizer', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='organized_hackathons',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'ordering': ('-hacking_start', 'name'),
            },
        ),
    ]
