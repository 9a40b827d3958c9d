from decimal import Decimal
from unittest.mock import MagicMock, patch

from jobboard.schemas.schemas import JobSearchFilters
from jobboard.services import match_score_job, match_service


def search_result(*job_ids):
    return {"jobs": [{"job_id": job_id, "title": f"Job {job_id}"} for job_id in job_ids],
            "total": len(job_ids), "page": 1, "page_size": 20}


# ============================================================
# BATCH SCORES
# ============================================================

def test_batch_scores_use_cache_and_placeholder():
    rows = [{"job_id": 1, "overall_score": 91, "match_explanation": "Great", "ai_confidence_score": Decimal("0.80")}]

    with patch("jobboard.services.match_service.execute_raw_sql", return_value=rows):
        scores = match_service.get_batch_job_match_scores([1, 2], 11)

    assert scores[1] == {"score": 91, "explanation": "Great", "confidence": 0.8}
    assert scores[2] == match_service.PENDING_SCORE


def test_batch_scores_degrade_on_query_error():
    with patch("jobboard.services.match_service.execute_raw_sql", side_effect=RuntimeError("db down")):
        scores = match_service.get_batch_job_match_scores([1, 2], 11)

    assert scores == {1: match_service.ERROR_SCORE, 2: match_service.ERROR_SCORE}


def test_batch_scores_never_call_ai():
    with patch("jobboard.services.match_service.execute_raw_sql", return_value=[]), \
            patch("jobboard.services.match_service.calculate_match_score") as scorer:
        match_service.get_batch_job_match_scores([3], 11)

    scorer.assert_not_called()
    assert match_service.get_batch_job_match_scores([], 11) == {}


# ============================================================
# SINGLE SCORE
# ============================================================

def test_cached_score_is_returned_without_ai():
    cached = {"overall_score": 66, "match_explanation": "ok", "ai_confidence_score": None}

    with patch("jobboard.services.match_service.fetch_one", return_value=cached), \
            patch("jobboard.services.match_service.calculate_match_score_for_job_user") as compute:
        score = match_service.get_job_match_score(1, 11)

    compute.assert_not_called()
    assert score == {"score": 66, "explanation": "ok", "confidence": None}


def test_missing_score_is_computed():
    computed = {"overall_score": 72, "match_explanation": "fine", "ai_confidence_score": 0.6}

    with patch("jobboard.services.match_service.fetch_one", return_value=None), \
            patch("jobboard.services.match_service.calculate_match_score_for_job_user", return_value=computed):
        assert match_service.get_job_match_score(1, 11) == {"score": 72, "explanation": "fine", "confidence": 0.6}


def test_score_errors_give_none():
    with patch("jobboard.services.match_service.fetch_one", side_effect=RuntimeError("db down")):
        assert match_service.get_job_match_score(1, 11) is None


def test_unknown_candidate_is_not_scored():
    with patch("jobboard.services.match_service.load_job_data", return_value=MagicMock()), \
            patch("jobboard.services.match_service.load_candidate_data", return_value=None), \
            patch("jobboard.services.match_service.calculate_match_score") as scorer:
        assert match_service.calculate_match_score_for_job_user(1, 21) is None

    scorer.assert_not_called()


# ============================================================
# SEARCH
# ============================================================

def test_anonymous_search_has_no_scores():
    with patch("jobboard.services.match_service.search_jobs", return_value=search_result(1, 2)), \
            patch("jobboard.services.match_service.get_batch_job_match_scores") as batch:
        result = match_service.search_jobs_with_match_scores(None, JobSearchFilters())

    batch.assert_not_called()
    assert [job["match_score"] for job in result["jobs"]] == [None, None]


def test_seeker_search_is_sorted_best_match_first():
    scores = {
        1: {"score": 60, "explanation": "a", "confidence": 0.5},
        2: {"score": 90, "explanation": "b", "confidence": 0.9},
        3: {"score": 60, "explanation": "c", "confidence": 0.5},
    }

    with patch("jobboard.services.match_service.search_jobs", return_value=search_result(1, 2, 3)), \
            patch("jobboard.services.match_service.get_batch_job_match_scores", return_value=scores):
        result = match_service.search_jobs_with_match_scores(11, JobSearchFilters())

    assert [job["job_id"] for job in result["jobs"]] == [2, 1, 3]
    assert result["jobs"][0]["match_explanation"] == "b"
    assert result["total"] == 3


# ============================================================
# BACKGROUND JOB
# ============================================================

def test_pair_is_queued_once_until_it_runs():
    tasks = MagicMock()

    with patch("jobboard.services.match_service.calculate_match_score_for_job_user",
               return_value={"overall_score": 70}) as compute:
        assert match_score_job.enqueue_match_score_job(tasks, 501, 11) is True
        assert match_score_job.enqueue_match_score_job(tasks, 501, 11) is False
        assert match_score_job.is_in_flight(501, 11)
        tasks.add_task.assert_called_once_with(match_score_job.run_match_score_job, 501, 11)

        match_score_job.run_match_score_job(501, 11)

    compute.assert_called_once_with(501, 11)
    assert not match_score_job.is_in_flight(501, 11)


def test_failed_job_is_released():
    tasks = MagicMock()

    with patch("jobboard.services.match_service.calculate_match_score_for_job_user",
               side_effect=RuntimeError("boom")):
        match_score_job.enqueue_match_score_job(tasks, 502, 11)
        match_score_job.run_match_score_job(502, 11)

    assert not match_score_job.is_in_flight(502, 11)
    assert match_score_job.enqueue_match_score_job(tasks, 502, 11) is True
    match_score_job._in_flight.discard((502, 11))
