from django.db import migrations, models

import submissions.models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Submission',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('token', models.CharField(default=submissions.models.generate_token, editable=False, max_length=36, unique=True)),
                ('source_code', models.BinaryField()),
                ('language_id', models.IntegerField()),
                ('compiler_options', models.CharField(blank=True, max_length=512, null=True)),
                ('command_line_arguments', models.CharField(blank=True, max_length=512, null=True)),
                ('number_of_runs', models.IntegerField()),
                ('stdin', models.BinaryField(blank=True, null=True)),
                ('expected_output', models.BinaryField(blank=True, null=True)),
                ('cpu_time_limit', models.FloatField()),
                ('cpu_extra_time', models.FloatField()),
                ('wall_time_limit', models.FloatField()),
                ('memory_limit', models.IntegerField()),
                ('stack_limit', models.IntegerField()),
                ('max_processes_and_or_threads', models.IntegerField()),
                ('enable_per_process_and_thread_time_limit', models.BooleanField(default=False)),
                ('enable_per_process_and_thread_memory_limit', models.BooleanField(default=False)),
                ('max_file_size', models.IntegerField()),
                ('redirect_stderr_to_stdout', models.BooleanField(default=False)),
                ('callback_url', models.URLField(blank=True, max_length=2048, null=True)),
                ('stdout', models.BinaryField(blank=True, null=True)),
                ('stderr', models.BinaryField(blank=True, null=True)),
                ('compile_output', models.BinaryField(blank=True, null=True)),
                ('message', models.BinaryField(blank=True, null=True)),
                ('exit_code', models.IntegerField(blank=True, null=True)),
                ('exit_signal', models.IntegerField(blank=True, null=True)),
                ('time', models.FloatField(blank=True, null=True)),
                ('wall_time', models.FloatField(blank=True, null=True)),
                ('memory', models.IntegerField(blank=True, null=True)),
                ('status_id', models.IntegerField(choices=[(1, 'In Queue'), (2, 'Processing'), (3, 'Accepted'), (4, 'Wrong Answer'), (5, 'Time Limit Exceeded'), (6, 'Compilation Error'), (7, 'Runtime Error (SIGSEGV)'), (8, 'Runtime Error (SIGXFSZ)'), (9, 'Runtime Error (SIGFPE)'), (10, 'Runtime Error (SIGABRT)'), (11, 'Runtime Error (NZEC)'), (12, 'Runtime Error (Other)'), (13, 'Internal Error'), (14, 'Exec Format Error')], db_index=True, default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('finished_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
