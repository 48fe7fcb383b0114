from uigen.domain.models import GenerationLog


def _log(**kwargs):
    values = dict(
        product="crm",
        input_type="natural-language",
        status="completed",
        generation_time_ms=12.5,
        template_version=2,
    )
    values.update(kwargs)
    return GenerationLog(**values)


def test_write_assigns_id_and_timestamp(repositories):
    log = repositories.log_repo.write(
        _log(
            job_id="job-1",
            artifact_summary={"root": "screen", "functions": ["fn_init"]},
            warnings=("Removed unreferenced function fn_x",),
        )
    )

    assert log.id is not None
    assert log.created_at is not None
    stored = repositories.log_repo.get(log.id)
    assert stored.artifact_summary == {"root": "screen", "functions": ["fn_init"]}
    assert stored.warnings == ("Removed unreferenced function fn_x",)
    assert stored.generation_time_ms == 12.5


def test_failure_fields(repositories):
    log = repositories.log_repo.write(
        _log(
            status="failed",
            stage="output_parser",
            error_type="ParseError",
            error_message="no markers",
            raw_output="just prose",
        )
    )

    stored = repositories.log_repo.get(log.id)
    assert stored.stage == "output_parser"
    assert stored.error_type == "ParseError"
    assert stored.raw_output == "just prose"
    assert stored.artifact_summary == {}


def test_list_for_job(repositories):
    repositories.log_repo.write(_log(job_id="job-1"))
    repositories.log_repo.write(_log(job_id="job-2"))
    repositories.log_repo.write(_log(job_id="job-1", status="failed"))

    logs = repositories.log_repo.list_for_job("job-1")
    assert [log.status for log in logs] == ["completed", "failed"]


def test_get_unknown(repositories):
    assert repositories.log_repo.get(999) is None
