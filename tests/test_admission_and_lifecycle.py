"""
Tests for queue admission and delete lifecycle rules
"""

import pytest

from submissions.errors import CapacityError, FeatureDisabledError, LifecycleError
from submissions.statuses import Status
from submissions.utils.admission_utils import admit
from submissions.utils.lifecycle_utils import ensure_deletable


class TestAdmit:
    """Admission against MAX_QUEUE_SIZE"""

    def test_admits_below_maximum(self, settings, fake_queue):
        settings.MAX_QUEUE_SIZE = 10
        fake_queue.size = 9

        admit()

    @pytest.mark.parametrize("depth", [10, 11, 500])
    def test_rejects_at_or_above_maximum(self, settings, fake_queue, depth):
        settings.MAX_QUEUE_SIZE = 10
        fake_queue.size = depth

        with pytest.raises(CapacityError) as exc:
            admit()

        assert str(exc.value) == "queue is full"
        assert exc.value.status_code == 503

    def test_unreachable_queue_rejects(self, monkeypatch):
        def broken():
            raise ConnectionError("no broker")
        monkeypatch.setattr("submissions.utils.admission_utils.queue_size", broken)

        with pytest.raises(CapacityError, match="queue is unavailable"):
            admit()


@pytest.mark.django_db
class TestEnsureDeletable:
    """Delete is gated by ENABLE_SUBMISSION_DELETE and terminal status"""

    @pytest.mark.parametrize("status", [Status.IN_QUEUE, Status.PROCESSING])
    def test_active_submission_cannot_be_deleted(self, settings, make_submission, status):
        settings.ENABLE_SUBMISSION_DELETE = True
        submission = make_submission(status_id=status)

        with pytest.raises(LifecycleError) as exc:
            ensure_deletable(submission)

        assert str(exc.value) == (
            f"submission cannot be deleted because its status is {status.value} ({status.label})"
        )

    @pytest.mark.parametrize("status", [s for s in Status if s not in (Status.IN_QUEUE, Status.PROCESSING)])
    def test_terminal_submission_can_be_deleted(self, settings, make_submission, status):
        settings.ENABLE_SUBMISSION_DELETE = True

        ensure_deletable(make_submission(status_id=status))

    def test_disabled_delete_wins_over_status(self, settings, make_submission):
        """The feature flag is checked before the status"""
        settings.ENABLE_SUBMISSION_DELETE = False

        with pytest.raises(FeatureDisabledError, match="delete not allowed"):
            ensure_deletable(make_submission(status_id=Status.PROCESSING))
