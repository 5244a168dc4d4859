import asyncio

import pytest

pytest.importorskip("gradio")

from ..gradio_app import build_demo, process_comparison  # noqa: E402


def _run(*args):
    return asyncio.run(process_comparison(*args))


def test_pasted_text_is_compared(old_contract_text, new_contract_text):
    html = _run(None, None, old_contract_text, new_contract_text, "pdfplumber", "structured")

    assert "Found 4 payout changes" in html


def test_uploaded_files_are_compared(contract_files):
    old_path, new_path = contract_files

    html = _run(str(old_path), str(new_path), "", "", "pdfplumber", "lines")

    assert "<h3>Line-by-Line Changes</h3>" in html


def test_upload_and_pasted_text_are_resolved_per_side(contract_files, new_contract_text):
    old_path, _ = contract_files

    html = _run(str(old_path), None, "", new_contract_text, "pdfplumber", "structured")

    assert "Found 4 payout changes" in html


def test_uploaded_file_wins_over_pasted_text(contract_files, old_contract_text):
    _, new_path = contract_files

    html = _run(None, str(new_path), old_contract_text, "Registration: ignored", "pdfplumber", "structured")

    assert "Found 4 payout changes" in html


def test_single_upload_is_reported_inline(contract_files):
    old_path, _ = contract_files

    html = _run(str(old_path), None, "", "", "pdfplumber", "structured")

    assert "Please select both contracts to compare." in html


def test_missing_input_is_reported_inline():
    html = _run(None, None, "", "   ", "pdfplumber", "structured")

    assert "Please select both contracts to compare." in html


def test_extraction_error_is_reported_inline(contract_files, tmp_path):
    old_path, _ = contract_files
    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"not a pdf")

    html = _run(str(old_path), str(broken), "", "", "pdfplumber", "structured")

    assert "An error occurred" in html
    assert "<pre>" in html


def test_build_demo():
    assert build_demo() is not None
