from __future__ import annotations

import pytest

from lingoost.services.dubbing import (
    CallbackUpdate,
    DubJobState,
    PollResult,
    SubmissionStatus,
)
from lingoost.services.errors import (
    InvalidJobTransition,
    JobNotFound,
    RemoteStatusUnavailable,
)

SECTION = "section-42"
SOURCE = "https://videos.test/section-42.mp4"


def _submit_one(orchestrator, language: str = "ja") -> str:
    result = orchestrator.submit(SECTION, SOURCE, [language])
    assert result.outcomes[0].status == SubmissionStatus.ACCEPTED
    return result.outcomes[0].job_id


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


def test_submit_creates_one_submitted_job_per_language(orchestrator, fake_client, job_store) -> None:
    result = orchestrator.submit(SECTION, SOURCE, ["ja", "en-US"])

    assert result.accepted
    assert [outcome.language for outcome in result.outcomes] == ["ja", "en"]
    assert [call["language"] for call in fake_client.created] == ["ja", "en"]
    for outcome in result.outcomes:
        job = job_store.get(outcome.job_id)
        assert job.state == DubJobState.SUBMITTED
        assert job.remote_job_id is not None
        assert job.submitted_at is not None
        assert job.source_video_location == SOURCE


def test_submit_rejects_unsupported_and_repeated_languages(orchestrator, fake_client) -> None:
    result = orchestrator.submit(SECTION, SOURCE, ["jpn", "ja-JP", "xx", "origin"])

    statuses = [(outcome.requested_language, outcome.status, outcome.reason) for outcome in result.outcomes]
    assert statuses == [
        ("jpn", SubmissionStatus.ACCEPTED, None),
        ("ja-JP", SubmissionStatus.REJECTED, "duplicate_in_request"),
        ("xx", SubmissionStatus.REJECTED, "unsupported_language"),
        ("origin", SubmissionStatus.REJECTED, "unsupported_language"),
    ]
    assert result.rejected_languages == ["ja-JP", "xx", "origin"]
    assert len(fake_client.created) == 1


def test_second_submission_for_active_pair_is_rejected(orchestrator, fake_client) -> None:
    job_id = _submit_one(orchestrator)

    result = orchestrator.submit(SECTION, SOURCE, ["ja", "ko"])

    rejected, accepted = result.outcomes
    assert rejected.status == SubmissionStatus.REJECTED
    assert rejected.reason == "duplicate"
    assert rejected.error_code == "submission_rejected"
    assert rejected.existing_job_id == job_id
    assert rejected.job_id is None
    assert accepted.status == SubmissionStatus.ACCEPTED
    assert len(fake_client.created) == 2


def test_coalesce_policy_returns_the_active_job(make_orchestrator, fake_client) -> None:
    orchestrator = make_orchestrator(duplicate_submission_policy="coalesce")
    job_id = _submit_one(orchestrator)

    result = orchestrator.submit(SECTION, SOURCE, ["ja"])

    outcome = result.outcomes[0]
    assert outcome.status == SubmissionStatus.COALESCED
    assert outcome.job_id == job_id
    assert result.accepted
    assert len(fake_client.created) == 1


def test_remote_failure_fails_only_that_language(orchestrator, fake_client, job_store) -> None:
    fake_client.fail_languages = {"en"}

    result = orchestrator.submit(SECTION, SOURCE, ["en", "ja"])

    failed, accepted = result.outcomes
    assert failed.status == SubmissionStatus.FAILED
    assert failed.error_code == "remote_submission_failed"
    assert accepted.status == SubmissionStatus.ACCEPTED
    job = job_store.get(failed.job_id)
    assert job.state == DubJobState.FAILED
    assert "remote refused en" in job.last_error
    assert job.completed_at is not None
    assert result.failed_languages == ["en"]

    # A failed job is terminal, so the pair can be resubmitted.
    fake_client.fail_languages = set()
    retry = orchestrator.submit(SECTION, SOURCE, ["en"])
    assert retry.outcomes[0].status == SubmissionStatus.ACCEPTED
    assert retry.outcomes[0].job_id != failed.job_id


# ---------------------------------------------------------------------------
# Advancement
# ---------------------------------------------------------------------------


def test_callbacks_advance_to_ready_and_notify_once(orchestrator, clock) -> None:
    ready_jobs = []
    orchestrator.add_ready_listener(ready_jobs.append)
    job_id = _submit_one(orchestrator)

    clock.advance(5)
    processing = orchestrator.advance(job_id, CallbackUpdate(state=DubJobState.PROCESSING))
    assert processing.state == DubJobState.PROCESSING
    assert processing.processing_started_at == clock.now

    clock.advance(5)
    ready = orchestrator.advance(job_id, CallbackUpdate(state=DubJobState.READY))
    again = orchestrator.advance(job_id, PollResult(state=DubJobState.READY))

    assert ready.state == DubJobState.READY
    assert ready.result_track_location == (
        "https://cdn.test/assets/curriculumsection/section-42/dubTracks/ja.m3u8"
    )
    assert ready.completed_at == clock.now
    assert again == ready
    assert [job.job_id for job in ready_jobs] == [job_id]


def test_relative_result_location_is_resolved_against_cdn(orchestrator) -> None:
    job_id = _submit_one(orchestrator)

    ready = orchestrator.advance(
        job_id, CallbackUpdate(state=DubJobState.READY, result_location="/custom/ja.m3u8")
    )

    assert ready.result_track_location == "https://cdn.test/custom/ja.m3u8"


@pytest.mark.parametrize(
    ("first", "second"),
    [
        (DubJobState.READY, DubJobState.PROCESSING),
        (DubJobState.READY, DubJobState.FAILED),
        (DubJobState.FAILED, DubJobState.READY),
        (DubJobState.PROCESSING, DubJobState.SUBMITTED),
    ],
)
def test_terminal_and_backward_moves_are_refused(orchestrator, first, second) -> None:
    job_id = _submit_one(orchestrator)
    orchestrator.advance(job_id, CallbackUpdate(state=first, error="boom"))

    with pytest.raises(InvalidJobTransition) as excinfo:
        orchestrator.advance(job_id, CallbackUpdate(state=second))

    assert excinfo.value.current_state == first.value
    assert orchestrator.get_job(job_id).state == first


def test_failed_callback_records_error(orchestrator) -> None:
    job_id = _submit_one(orchestrator)

    failed = orchestrator.advance(
        job_id, CallbackUpdate(state=DubJobState.FAILED, error="voice model unavailable")
    )

    assert failed.last_error == "voice model unavailable"
    assert failed.result_track_location is None


def test_listener_errors_do_not_break_advancement(orchestrator) -> None:
    def _broken(job):
        raise RuntimeError("listener exploded")

    orchestrator.add_ready_listener(_broken)
    job_id = _submit_one(orchestrator)

    assert orchestrator.advance(job_id, CallbackUpdate(state=DubJobState.READY)).state == DubJobState.READY


def test_advance_remote_looks_up_the_remote_handle(orchestrator, fake_client) -> None:
    job_id = _submit_one(orchestrator)
    remote_id = fake_client.created[0]["remote_id"]

    job = orchestrator.advance_remote(remote_id, CallbackUpdate(state=DubJobState.PROCESSING))

    assert job.job_id == job_id
    with pytest.raises(JobNotFound):
        orchestrator.advance_remote("unknown", CallbackUpdate(state=DubJobState.READY))


def test_resubmission_after_ready_creates_a_new_job(orchestrator) -> None:
    job_id = _submit_one(orchestrator)
    orchestrator.advance(job_id, CallbackUpdate(state=DubJobState.READY))

    new_job_id = _submit_one(orchestrator)

    assert new_job_id != job_id
    statuses = orchestrator.get_job_status(SECTION)
    assert [job.job_id for job in statuses] == [new_job_id]


# ---------------------------------------------------------------------------
# Polling and timeouts
# ---------------------------------------------------------------------------


def test_poll_job_applies_remote_state(orchestrator, fake_client) -> None:
    job_id = _submit_one(orchestrator)
    remote_id = fake_client.created[0]["remote_id"]
    fake_client.statuses[remote_id] = PollResult(state=DubJobState.READY, remote_status="dubbed")

    job = orchestrator.poll_job(job_id)

    assert job.state == DubJobState.READY
    assert fake_client.polled == [remote_id]
    # Terminal jobs are no longer polled.
    orchestrator.poll_job(job_id)
    assert fake_client.polled == [remote_id]


def test_poll_job_keeps_state_when_status_is_unavailable(orchestrator, fake_client) -> None:
    job_id = _submit_one(orchestrator)
    remote_id = fake_client.created[0]["remote_id"]
    fake_client.statuses[remote_id] = RemoteStatusUnavailable("status endpoint down")

    job = orchestrator.poll_job(job_id)

    assert job.state == DubJobState.SUBMITTED


def test_poll_active_polls_every_submitted_job(orchestrator, fake_client) -> None:
    orchestrator.submit(SECTION, SOURCE, ["ja", "ko"])

    polled = orchestrator.poll_active()

    assert {job.state for job in polled} == {DubJobState.PROCESSING}
    assert sorted(fake_client.polled) == ["remote-1", "remote-2"]


def test_stale_jobs_time_out(orchestrator, clock) -> None:
    job_id = _submit_one(orchestrator)
    orchestrator.advance(job_id, CallbackUpdate(state=DubJobState.PROCESSING))

    clock.advance(30)
    assert orchestrator.expire_stale() == []

    clock.advance(31)
    expired = orchestrator.expire_stale()

    assert [job.job_id for job in expired] == [job_id]
    job = orchestrator.get_job(job_id)
    assert job.state == DubJobState.FAILED
    assert "timed out after 60s in processing" in job.last_error


def test_poll_job_expires_instead_of_polling(orchestrator, fake_client, clock) -> None:
    job_id = _submit_one(orchestrator)
    clock.advance(120)

    job = orchestrator.poll_job(job_id)

    assert job.state == DubJobState.FAILED
    assert fake_client.polled == []


def test_job_status_reports_latest_job_per_language(orchestrator, fake_client) -> None:
    fake_client.fail_languages = {"ko"}
    orchestrator.submit(SECTION, SOURCE, ["ko", "ja"])
    fake_client.fail_languages = set()
    retry = orchestrator.submit(SECTION, SOURCE, ["ko"])

    statuses = orchestrator.get_job_status(SECTION)

    assert [job.target_language for job in statuses] == ["ja", "ko"]
    assert statuses[1].job_id == retry.outcomes[0].job_id
    assert orchestrator.get_job_status("missing") == []
