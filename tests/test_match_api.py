from hiring_engine.models.match_result import MatchResult
from hiring_engine.models.resume import Resume


def _run(client, headers, resume_id, jd_id):
    return client.post("/api/match", json={"resumeId": resume_id, "jobDescriptionId": jd_id}, headers=headers)


def test_match_endpoint(client, recruiter, auth_headers, make_resume, make_job):
    resume = make_resume(owner=recruiter)
    jd = make_job(owner=recruiter, applicants=3)

    response = _run(client, auth_headers(recruiter), resume.id, jd.id)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["created"] is True
    assert body["data"]["fitScore"] == 78.0
    assert body["data"]["matchDetails"]["matchedSkills"] == ["Python", "SQL"]
    assert body["data"]["gapAnalysis"]["recommendations"]
    assert len(body["data"]["interviewQuestions"]) == 2

    response = client.get(f"/api/job-descriptions/{jd.id}", headers=auth_headers(recruiter))
    assert response.json()["data"]["applicants"] == 4


def test_match_missing_ids(client, recruiter, auth_headers, fake_ml):
    response = client.post("/api/match", json={"resumeId": 1}, headers=auth_headers(recruiter))
    assert response.status_code == 400
    assert response.json()["error"] == "Resume ID and Job Description ID are required"
    assert fake_ml.calls == []


def test_match_unknown_records(client, recruiter, auth_headers):
    response = _run(client, auth_headers(recruiter), 123, 456)
    assert response.status_code == 404
    assert response.json()["error"] == "Resume or Job Description not found"


def test_match_upstream_failure(client, db_session, recruiter, auth_headers, fake_ml, make_resume, make_job):
    resume = make_resume()
    jd = make_job()
    fake_ml.fail_on = "improve"

    response = _run(client, auth_headers(recruiter), resume.id, jd.id)
    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "UPSTREAM_ERROR"
    assert body["details"]["endpoint"] == "improve"
    assert db_session.query(MatchResult).count() == 0


def test_list_matches_sorted_and_filtered(client, recruiter, auth_headers, fake_ml, make_resume, make_job):
    headers = auth_headers(recruiter)
    jane = make_resume(name="Jane Doe")
    john = make_resume(name="John Roe")
    backend = make_job(title="Backend Engineer")
    data = make_job(title="Data Engineer")

    for resume, jd, score in ((jane, backend, 55.0), (john, backend, 88.0), (jane, data, 72.0)):
        fake_ml.fit_score = score
        assert _run(client, headers, resume.id, jd.id).status_code == 200

    body = client.get("/api/matches", headers=headers).json()
    assert body["total"] == 3
    assert [m["fitScore"] for m in body["matches"]] == [88.0, 72.0, 55.0]
    top = body["matches"][0]
    assert top["resume"]["candidateName"] == "John Roe"
    assert top["resume"]["fileName"] == "john_roe.pdf"
    assert top["jobDescription"]["title"] == "Backend Engineer"

    body = client.get("/api/matches", params={"jobDescriptionId": backend.id}, headers=headers).json()
    assert body["total"] == 2

    body = client.get("/api/matches", params={"resumeId": jane.id, "minScore": 60}, headers=headers).json()
    assert [m["fitScore"] for m in body["matches"]] == [72.0]


def test_get_update_delete_match(client, db_session, recruiter, auth_headers, make_resume, make_job):
    headers = auth_headers(recruiter)
    resume = make_resume()
    jd = make_job()
    match_id = _run(client, headers, resume.id, jd.id).json()["matchId"]

    response = client.get(f"/api/matches/{match_id}", headers=headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["resume"]["extractedText"] == "Jane Doe resume text"
    assert data["jobDescription"]["description"]

    response = client.put(
        f"/api/matches/{match_id}",
        json={
            "status": "shortlisted",
            "recruiterNotes": "Strong on SQL",
            "feedback": {"recruiterRating": 4, "comments": "Good fit"},
            "ranking": 1,
        },
        headers=headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "shortlisted"
    assert data["recruiterNotes"] == "Strong on SQL"
    assert data["feedback"] == {"recruiterRating": 4, "comments": "Good fit"}
    assert data["ranking"] == 1

    response = client.put(f"/api/matches/{match_id}", json={"status": "hired"}, headers=headers)
    assert response.status_code == 400

    response = client.delete(f"/api/matches/{match_id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Match deleted successfully"
    assert client.get(f"/api/matches/{match_id}", headers=headers).status_code == 404


def test_deleting_resume_cascades_to_matches(client, db_session, recruiter, auth_headers, make_resume, make_job):
    headers = auth_headers(recruiter)
    resume = make_resume(owner=recruiter)
    jd = make_job()
    _run(client, headers, resume.id, jd.id)

    assert client.delete(f"/api/resumes/{resume.id}", headers=headers).status_code == 200
    assert db_session.query(Resume).count() == 0
    assert db_session.query(MatchResult).count() == 0


def test_rematch_counts_applicant_again(client, recruiter, auth_headers, make_resume, make_job):
    headers = auth_headers(recruiter)
    resume = make_resume()
    jd = make_job(applicants=2)

    assert _run(client, headers, resume.id, jd.id).json()["created"] is True
    second = _run(client, headers, resume.id, jd.id)
    assert second.status_code == 200
    assert second.json()["created"] is False

    response = client.get(f"/api/job-descriptions/{jd.id}", headers=headers)
    assert response.json()["data"]["applicants"] == 4


def test_skill_objects_do_not_break_listings(client, recruiter, auth_headers, fake_ml, make_job):
    headers = auth_headers(recruiter)
    fake_ml.parsed_resume["skills"] = [{"name": "Python", "level": "expert"}, "SQL", {"level": "junior"}]
    resume_id = client.post(
        "/api/parse-resume", files={"resume": ("jane.pdf", b"%PDF-1.4", "application/pdf")}, headers=headers
    ).json()["resumeId"]
    jd = make_job(owner=recruiter)
    assert _run(client, headers, resume_id, jd.id).status_code == 200

    response = client.get("/api/matches", headers=headers)
    assert response.status_code == 200
    assert response.json()["matches"][0]["resume"]["skills"] == ["Python", "SQL"]

    response = client.get("/api/dashboard", headers=headers)
    assert response.status_code == 200
    assert response.json()["topCandidates"][0]["resume"]["skills"] == ["Python", "SQL"]
