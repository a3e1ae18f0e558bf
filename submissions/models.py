import uuid

from django.db import models

from .statuses import Status


def generate_token() -> str:
    return str(uuid.uuid4())


class Submission(models.Model):
    token = models.CharField(max_length=36, unique=True, default=generate_token, editable=False)

    # Payload
    source_code = models.BinaryField()
    language_id = models.IntegerField()
    compiler_options = models.CharField(max_length=512, null=True, blank=True)
    command_line_arguments = models.CharField(max_length=512, null=True, blank=True)
    number_of_runs = models.IntegerField()
    stdin = models.BinaryField(null=True, blank=True)
    expected_output = models.BinaryField(null=True, blank=True)
    cpu_time_limit = models.FloatField()
    cpu_extra_time = models.FloatField()
    wall_time_limit = models.FloatField()
    memory_limit = models.IntegerField()
    stack_limit = models.IntegerField()
    max_processes_and_or_threads = models.IntegerField()
    enable_per_process_and_thread_time_limit = models.BooleanField(default=False)
    enable_per_process_and_thread_memory_limit = models.BooleanField(default=False)
    max_file_size = models.IntegerField()
    redirect_stderr_to_stdout = models.BooleanField(default=False)
    callback_url = models.URLField(max_length=2048, null=True, blank=True)

    # Results, written once by the execution engine
    stdout = models.BinaryField(null=True, blank=True)
    stderr = models.BinaryField(null=True, blank=True)
    compile_output = models.BinaryField(null=True, blank=True)
    message = models.BinaryField(null=True, blank=True)
    exit_code = models.IntegerField(null=True, blank=True)
    exit_signal = models.IntegerField(null=True, blank=True)
    time = models.FloatField(null=True, blank=True)
    wall_time = models.FloatField(null=True, blank=True)
    memory = models.IntegerField(null=True, blank=True)

    status_id = models.IntegerField(choices=Status.choices, default=Status.IN_QUEUE, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    finished_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"Submission[{self.token}] status={self.status_id}"

    @property
    def status(self) -> Status:
        return Status(self.status_id)
