from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='RaceSetting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('season', models.PositiveIntegerField(unique=True)),
                ('goal_radius', models.FloatField(help_text='Auto-finish radius around the finish line, in meters')),
                ('rank_limit', models.PositiveIntegerField(help_text='Top-N shown per category')),
                ('senior_year', models.PositiveIntegerField(help_text='Birth years up to and including this are senior')),
                ('finish_lat', models.FloatField()),
                ('finish_lng', models.FloatField()),
                ('start_time', models.DateTimeField(blank=True, null=True)),
                ('finish_time', models.DateTimeField(blank=True, null=True)),
                ('is_counting_down', models.BooleanField(default=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
        ),
    ]
