"""Tests for the job update protocol."""

import pytest

from active_status.exceptions import InvalidUpdate
from active_status.types import Job, JobStatus, Progress
from active_status.updates import (
    ChangeStatus,
    DimMarker,
    ProgressTick,
    SetPrefix,
    SetProgressFormatter,
    StartProgress,
    apply_update,
    change_status,
    clear_progress,
    complete_progress,
    progress_tick,
    set_prefix,
    set_progress_formatter,
    start_progress,
    validate_update,
)


@pytest.fixture
def job():
    return Job(id=1, line=1)


class TestApplyUpdate:
    def test_string_replaces_summary(self, job):
        updated = apply_update(job, "working", now=3.0)
        assert updated.summary == "working"
        assert updated.active
        assert updated.updated == 3.0

    def test_change_status(self, job):
        updated = apply_update(job, change_status("warning"), now=1.0)
        assert updated.status is JobStatus.WARNING

    def test_set_and_clear_prefix(self, job):
        updated = apply_update(job, set_prefix("db: "), now=1.0)
        assert updated.prefix == "db: "
        assert apply_update(updated, set_prefix(None), now=2.0).prefix is None

    def test_progress_lifecycle(self, job):
        job = apply_update(job, start_progress(4), now=10.0)
        assert job.progress == Progress(current=0, target=4, created=10.0)

        job = apply_update(job, progress_tick(), now=11.0)
        job = apply_update(job, progress_tick(2), now=12.0)
        assert job.progress.current == 3

        job = apply_update(job, complete_progress(), now=13.0)
        assert job.progress.current == 4
        assert job.progress.created == 10.0

        job = apply_update(job, clear_progress(), now=14.0)
        assert job.progress is None

    def test_tick_without_progress_is_invalid(self, job):
        with pytest.raises(InvalidUpdate, match="no progress started"):
            apply_update(job, progress_tick(), now=1.0)

    def test_complete_without_progress_is_invalid(self, job):
        with pytest.raises(InvalidUpdate):
            apply_update(job, complete_progress(), now=1.0)

    def test_progress_formatter_override(self, job):
        def formatter(progress, now):
            return "custom"

        updated = apply_update(job, set_progress_formatter(formatter), now=1.0)
        assert updated.progress_formatter is formatter

    def test_unknown_value_is_invalid(self, job):
        with pytest.raises(InvalidUpdate):
            apply_update(job, 42, now=1.0)

    def test_dim_marker_clears_active_when_current(self, job):
        job = apply_update(job, "x", now=5.0)
        dimmed = apply_update(job, DimMarker(updated=5.0), now=6.0)
        assert not dimmed.active
        assert dimmed.updated == 5.0

    def test_stale_dim_marker_is_ignored(self, job):
        job = apply_update(job, "x", now=5.0)
        job = apply_update(job, "y", now=5.5)
        assert apply_update(job, DimMarker(updated=5.0), now=6.0) == job


class TestValidateUpdate:
    @pytest.mark.parametrize(
        "value",
        ["text", change_status("error"), set_prefix("p"), start_progress(3), clear_progress()],
    )
    def test_accepts_public_updates(self, value):
        validate_update(value)

    @pytest.mark.parametrize("value", [None, 12, {"summary": "x"}, ("a", "b")])
    def test_rejects_other_values(self, value):
        with pytest.raises(InvalidUpdate) as exc_info:
            validate_update(value)
        assert exc_info.value.value == value

    def test_rejects_dim_marker(self):
        with pytest.raises(InvalidUpdate, match="internal"):
            validate_update(DimMarker(updated=1.0))

    def test_rejects_raw_status_string(self):
        with pytest.raises(InvalidUpdate, match="unknown status"):
            validate_update(ChangeStatus("purple"))

    @pytest.mark.parametrize(
        "value, field",
        [
            (SetPrefix(5), "prefix"),
            (StartProgress("ten"), "target"),
            (StartProgress(True), "target"),
            (ProgressTick(1.5), "amount"),
            (SetProgressFormatter("{current}/{target}"), "formatter"),
        ],
    )
    def test_rejects_wrong_field_types(self, value, field):
        with pytest.raises(InvalidUpdate, match=field) as exc_info:
            validate_update(value)
        assert exc_info.value.value is value

    @pytest.mark.parametrize("value", [SetPrefix(None), SetProgressFormatter(None)])
    def test_accepts_none_to_clear(self, value):
        validate_update(value)


class TestChangeStatus:
    def test_accepts_enum_and_string(self):
        assert change_status(JobStatus.SUCCESS) == change_status("success")

    def test_unknown_status(self):
        with pytest.raises(InvalidUpdate):
            change_status("purple")
