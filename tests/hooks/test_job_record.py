"""Tests for JobRecord validation, tag extraction and action naming."""

import pytest

from jobsignal.core.errors import JobRecordError
from jobsignal.hooks.job_execution import (
    ACTION_MAILER_CLASSES,
    JobRecord,
    action_name,
    tags_for_job,
)


class TestJobRecordFromMapping:
    def test_full_mapping(self, job):
        record = JobRecord.from_mapping(job)

        assert record.job_class == "OrderJob"
        assert record.job_id == "b7d3c1a0-framework"
        assert record.provider_job_id == "sidekiq-9f2e"
        assert record.queue_name == "default"
        assert record.priority == 10
        assert record.enqueued_at == "2024-01-01T00:00:00Z"
        assert record.arguments == ({"order_id": 42, "password": "hunter2"}, "express")

    def test_minimal_mapping(self):
        record = JobRecord.from_mapping({"job_class": "OrderJob", "job_id": "abc"})

        assert record.provider_job_id is None
        assert record.queue_name is None
        assert record.priority is None
        assert record.enqueued_at is None
        assert record.arguments == ()

    def test_unknown_keys_are_ignored(self):
        record = JobRecord.from_mapping(
            {"job_class": "OrderJob", "job_id": "abc", "locale": "en", "executions": 1}
        )
        assert record.job_class == "OrderJob"

    def test_none_is_absent_but_empty_string_is_kept(self):
        record = JobRecord.from_mapping(
            {"job_class": "OrderJob", "job_id": "abc", "provider_job_id": "", "queue_name": None}
        )
        assert record.provider_job_id == ""
        assert record.queue_name is None

    def test_empty_queue_name_is_a_tag(self):
        record = JobRecord.from_mapping({"job_class": "OrderJob", "job_id": "abc", "queue_name": ""})
        assert tags_for_job(record) == {"queue": ""}

    @pytest.mark.parametrize("missing", ["job_class", "job_id"])
    def test_required_fields(self, job, missing):
        del job[missing]
        with pytest.raises(JobRecordError) as exc_info:
            JobRecord.from_mapping(job)
        assert exc_info.value.field == missing

    def test_rejects_non_mapping(self):
        with pytest.raises(JobRecordError):
            JobRecord.from_mapping(["OrderJob"])

    def test_rejects_non_numeric_priority(self, job):
        job["priority"] = "high"
        with pytest.raises(JobRecordError) as exc_info:
            JobRecord.from_mapping(job)
        assert exc_info.value.field == "priority"

    def test_rejects_string_arguments(self, job):
        job["arguments"] = "not-a-list"
        with pytest.raises(JobRecordError):
            JobRecord.from_mapping(job)

    def test_record_is_immutable(self, job):
        record = JobRecord.from_mapping(job)
        with pytest.raises(AttributeError):
            record.job_id = "other"

    def test_coerce_returns_record_unchanged(self):
        record = JobRecord(job_class="OrderJob", job_id="abc")
        assert JobRecord.coerce(record) is record


class TestCorrelationKey:
    def test_prefers_provider_job_id(self):
        record = JobRecord(job_class="OrderJob", job_id="abc", provider_job_id="xyz")
        assert record.correlation_key == "xyz"

    def test_falls_back_to_job_id(self):
        record = JobRecord(job_class="OrderJob", job_id="abc")
        assert record.correlation_key == "abc"

    def test_empty_provider_job_id_is_used(self):
        record = JobRecord(job_class="OrderJob", job_id="abc", provider_job_id="")
        assert record.correlation_key == ""


class TestTagsForJob:
    def test_queue_and_priority(self):
        record = JobRecord(job_class="OrderJob", job_id="abc", queue_name="default", priority=3)
        assert tags_for_job(record) == {"queue": "default", "priority": 3}

    def test_queue_only(self):
        record = JobRecord(job_class="OrderJob", job_id="abc", queue_name="default")
        assert tags_for_job(record) == {"queue": "default"}

    def test_priority_only(self):
        record = JobRecord(job_class="OrderJob", job_id="abc", priority=0)
        assert tags_for_job(record) == {"priority": 0}

    def test_no_tags(self):
        assert tags_for_job(JobRecord(job_class="OrderJob", job_id="abc")) == {}

    def test_fresh_dict_per_call(self):
        record = JobRecord(job_class="OrderJob", job_id="abc", queue_name="default")
        first = tags_for_job(record)
        first["status"] = "failed"
        assert tags_for_job(record) == {"queue": "default"}


class TestActionName:
    def test_regular_job(self):
        record = JobRecord(job_class="OrderJob", job_id="abc", arguments=("x", "y"))
        assert action_name(record) == "OrderJob#perform"

    def test_mailer_delivery_job(self):
        record = JobRecord(
            job_class="ActionMailer::DeliveryJob", job_id="abc", arguments=("Welcome", "send")
        )
        assert action_name(record) == "Welcome#send"

    @pytest.mark.parametrize("job_class", sorted(ACTION_MAILER_CLASSES))
    def test_all_mailer_classes(self, job_class):
        record = JobRecord(
            job_class=job_class,
            job_id="abc",
            arguments=("UserMailer", "reset_password", "deliver_now", {"user": 1}),
        )
        assert action_name(record) == "UserMailer#reset_password"

    def test_mailer_with_one_argument(self):
        record = JobRecord(job_class="ActionMailer::MailDeliveryJob", job_id="abc", arguments=("Welcome",))
        assert action_name(record) == "Welcome"

    def test_mailer_without_arguments(self):
        record = JobRecord(job_class="ActionMailer::MailDeliveryJob", job_id="abc")
        assert action_name(record) == ""

    def test_mailer_none_argument_renders_empty(self):
        record = JobRecord(
            job_class="ActionMailer::DeliveryJob", job_id="abc", arguments=(None, "send")
        )
        assert action_name(record) == "#send"
