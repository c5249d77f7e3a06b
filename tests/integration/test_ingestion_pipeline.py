"""
Integration tests for the complete ingestion pipeline
"""

import math
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from ingestion.loaders.postgres_loader import BatchWriter
from ingestion.runner import IngestionRunner, run_ingestion
from models.base import IngestionState


def recording_writer():
    """A BatchWriter whose batches are captured instead of inserted"""
    writer = BatchWriter()
    writer.write = AsyncMock(side_effect=lambda batch, db_session: len(batch))
    return writer


@pytest.mark.asyncio
async def test_full_ingestion_commits_all_valid_rows(fake_session, mock_report_generator, write_csv, mock_csv_lines):
    """
    Integration test: Parse → Build → Map → Load → Commit → Report
    """
    path = write_csv(mock_csv_lines)
    runner = IngestionRunner(fake_session, report_generator=mock_report_generator)

    result = await runner.run(path)

    assert result["status"] == "committed"
    assert result["lines_read"] == 4
    assert result["records_loaded"] == 4
    assert result["rows_malformed"] == 0
    assert result["rows_invalid"] == 0
    assert result["batches_written"] == 1
    assert result["error"] is None

    assert [row["name"] for row in fake_session.committed] == [
        "Rohit Prasad", "Ann Lee", "Raj Kumar", "Meera Iyer"
    ]
    assert fake_session.begin_calls == 1
    assert fake_session.commit_calls == 1
    assert fake_session.rollback_calls == 0

    mock_report_generator.generate.assert_awaited_once()
    assert result["report"] == "--- Age Distribution Report ---"
    assert runner.state == IngestionState.DONE


@pytest.mark.asyncio
async def test_batches_written_in_bounded_chunks(fake_session, mock_report_generator, write_csv, csv_header, make_rows):
    """N rows with batch size B give ceil(N / B) writes; the last holds the remainder"""
    rows = make_rows(25)
    path = write_csv([csv_header] + rows)
    writer = recording_writer()

    runner = IngestionRunner(fake_session, batch_size=10, writer=writer, report_generator=mock_report_generator)
    result = await runner.run(path)

    sizes = [len(call.args[0]) for call in writer.write.call_args_list]
    assert writer.write.call_count == math.ceil(25 / 10)
    assert sizes == [10, 10, 5]
    assert result["batches_written"] == 3
    assert result["records_loaded"] == 25

    for call in writer.write.call_args_list:
        assert call.args[1] is fake_session


@pytest.mark.asyncio
async def test_exact_multiple_has_no_trailing_empty_write(fake_session, mock_report_generator, write_csv, csv_header, make_rows):
    path = write_csv([csv_header] + make_rows(20))
    writer = recording_writer()

    await IngestionRunner(fake_session, batch_size=10, writer=writer, report_generator=mock_report_generator).run(path)

    assert [len(call.args[0]) for call in writer.write.call_args_list] == [10, 10]


@pytest.mark.asyncio
async def test_batch_order_follows_file_order(fake_session, mock_report_generator, write_csv, csv_header, make_rows):
    path = write_csv([csv_header] + make_rows(7))

    await IngestionRunner(fake_session, batch_size=3, report_generator=mock_report_generator).run(path)

    assert [row["name"] for row in fake_session.committed] == [f"First{i} Last{i}" for i in range(7)]


@pytest.mark.asyncio
async def test_short_row_is_skipped_and_run_commits(fake_session, mock_report_generator, write_csv, mock_csv_lines):
    lines = mock_csv_lines[:2] + ["Short,Row,30"] + mock_csv_lines[2:]
    path = write_csv(lines)

    result = await IngestionRunner(fake_session, report_generator=mock_report_generator).run(path)

    assert result["status"] == "committed"
    assert result["rows_malformed"] == 1
    assert result["records_loaded"] == 4
    assert "Short Row" not in [row["name"] for row in fake_session.committed]


@pytest.mark.asyncio
async def test_long_row_is_skipped(fake_session, mock_report_generator, write_csv, mock_csv_lines):
    lines = mock_csv_lines + ["Too,Many,30,,,,,,extra"]
    path = write_csv(lines)

    result = await IngestionRunner(fake_session, report_generator=mock_report_generator).run(path)

    assert result["rows_malformed"] == 1
    assert result["records_loaded"] == 4


@pytest.mark.asyncio
async def test_invalid_rows_never_reach_storage(fake_session, mock_report_generator, write_csv, csv_header):
    lines = [
        csv_header,
        "Ann,Lee,,,,,,",
        "Bob,Stone,old,,,,,",
        ",Nolast,30,,,,,",
        "Cara,Diaz,28,,,,,",
    ]
    path = write_csv(lines)

    result = await IngestionRunner(fake_session, report_generator=mock_report_generator).run(path)

    assert result["status"] == "committed"
    assert result["rows_invalid"] == 3
    assert [row["name"] for row in fake_session.committed] == ["Cara Diaz"]


@pytest.mark.asyncio
async def test_crlf_and_blank_lines_are_tolerated(fake_session, mock_report_generator, write_csv, mock_csv_lines):
    lines = ["", "  "] + mock_csv_lines[:2] + ["", "\t"] + mock_csv_lines[2:] + [""]
    path = write_csv(lines, newline="\r\n")

    result = await IngestionRunner(fake_session, report_generator=mock_report_generator).run(path)

    assert result["status"] == "committed"
    assert result["lines_read"] == 4
    assert result["records_loaded"] == 4


@pytest.mark.asyncio
async def test_empty_file_commits_nothing(fake_session, mock_report_generator, write_csv):
    path = write_csv([])

    result = await IngestionRunner(fake_session, report_generator=mock_report_generator).run(path)

    assert result["status"] == "committed"
    assert result["records_loaded"] == 0
    assert fake_session.execute_calls == 0
    mock_report_generator.generate.assert_awaited_once()


@pytest.mark.asyncio
async def test_header_only_file_commits_nothing(fake_session, mock_report_generator, write_csv, csv_header):
    path = write_csv([csv_header])

    result = await IngestionRunner(fake_session, report_generator=mock_report_generator).run(path)

    assert result["status"] == "committed"
    assert result["lines_read"] == 0
    assert fake_session.execute_calls == 0


@pytest.mark.asyncio
async def test_utf8_bom_is_stripped_from_header(fake_session, mock_report_generator, tmp_path):
    path = tmp_path / "bom.csv"
    path.write_bytes(b"\xef\xbb\xbfname.firstName,name.lastName,age\nAnn,Lee,30\nBob,Ray,40\n")

    result = await IngestionRunner(fake_session, report_generator=mock_report_generator).run(path)

    assert result["status"] == "committed"
    assert result["records_loaded"] == 2
    assert result["rows_invalid"] == 0
    assert [row["name"] for row in fake_session.committed] == ["Ann Lee", "Bob Ray"]


@pytest.mark.asyncio
async def test_run_ingestion_uses_fresh_session(write_csv, mock_csv_lines):
    path = write_csv(mock_csv_lines)
    session = MagicMock()
    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=session)
    session_cm.__aexit__ = AsyncMock(return_value=False)

    with patch("ingestion.runner.async_session_maker", return_value=session_cm), \
            patch("ingestion.runner.IngestionRunner") as mock_runner_cls:
        mock_runner_cls.return_value.run = AsyncMock(return_value={"status": "committed"})

        result = await run_ingestion(path)

    assert result == {"status": "committed"}
    mock_runner_cls.assert_called_once_with(session)
    session_cm.__aexit__.assert_awaited_once()
