from __future__ import annotations

import pytest

from helpdesk_metrics.pipeline import MissingDocumentError, TicketReportSession, run_metrics_pipeline


def test_run_metrics_pipeline(sample_csv, reference_time) -> None:
    metrics = run_metrics_pipeline(sample_csv, reference_time=reference_time)
    assert metrics.total_tickets == 5


def test_windows_line_endings_are_tolerated(sample_csv, reference_time) -> None:
    metrics = run_metrics_pipeline(sample_csv.replace("\n", "\r\n"), reference_time=reference_time)
    assert metrics.total_tickets == 5
    assert metrics.volume_by_inbox == {"Support": 3, "Sales": 1}


def test_session_from_file(sample_csv, reference_time, tmp_path) -> None:
    path = tmp_path / "export.csv"
    path.write_text(sample_csv, encoding="utf-8")

    session = TicketReportSession.from_file(str(path))

    assert session.file_name == "export.csv"
    assert session.metrics(reference_time).resolved_tickets == 2
    assert [ticket.id for ticket in session.backlog(reference_time)] == ["T3", "T5", "T2"]


def test_session_tickets_frame(sample_csv) -> None:
    frame = TicketReportSession(sample_csv).tickets_frame()

    assert frame["id"].tolist() == ["T1", "T2", "T3", "T4", "T5"]
    assert "response_time" in frame.columns


@pytest.mark.parametrize("text", ["", "  \n "])
def test_session_without_document_raises(text, reference_time) -> None:
    session = TicketReportSession(text)
    with pytest.raises(MissingDocumentError):
        session.metrics(reference_time)
    with pytest.raises(MissingDocumentError):
        session.backlog(reference_time)
