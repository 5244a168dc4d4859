"""
Gradio UI for comparing two payout contract versions.

Users upload the old and new contract (PDF or text export) or paste their
text, pick an extraction backend and a comparison mode, and get the HTML
report back.  Missing input and extraction failures are rendered inline.
"""

from __future__ import annotations

import asyncio
import logging
import traceback
from typing import Optional

import gradio as gr

from .comparison_pipeline import MissingInputError, build_comparison
from .pdf_text import BACKENDS, DEFAULT_BACKEND, TextExtractionError, extract_document_text_async
from .report import render_comparison_html, render_error_html, render_line_changes_html

logger = logging.getLogger(__name__)


def _file_path(file) -> Optional[str]:
    # Gradio hands over either a filepath string or a tempfile wrapper.
    if file is None:
        return None
    return getattr(file, "name", file)


def _has_input(file, text: Optional[str]) -> bool:
    return bool(_file_path(file)) or bool(text and text.strip())


async def _resolve_side(file, text: str, backend: str) -> str:
    """Text of one contract: the uploaded file if any, otherwise the pasted text."""

    path = _file_path(file)
    if path:
        return await extract_document_text_async(path, backend=backend)
    return text or ""


def _render(result, mode: str) -> str:
    if mode == "lines":
        return render_line_changes_html(result["line_changes"])
    return render_comparison_html(result["comparison"])


async def process_comparison(
    old_file,
    new_file,
    old_text: str,
    new_text: str,
    backend: str,
    mode: str,
) -> str:
    try:
        if not _has_input(old_file, old_text) or not _has_input(new_file, new_text):
            raise MissingInputError("Please select both contracts to compare.")
        old_contract, new_contract = await asyncio.gather(
            _resolve_side(old_file, old_text, backend),
            _resolve_side(new_file, new_text, backend),
        )
        result = build_comparison(old_contract, new_contract)
    except MissingInputError as exc:
        return render_error_html(str(exc))
    except TextExtractionError as exc:
        logger.exception("Extraction failed")
        return render_error_html(f"An error occurred: {exc}", traceback.format_exc())

    return _render(result, mode)


def build_demo() -> gr.Blocks:
    with gr.Blocks(title="Payout Contract Diff") as demo:
        gr.Markdown(
            """
            # Payout Contract Diff

            Upload the old and new versions of a contract (PDF or text), or
            paste their text, to see which payout conditions and contract
            terms changed.
            """
        )

        with gr.Row():
            with gr.Column(scale=1):
                old_file = gr.File(label="Old contract", file_types=[".pdf", ".txt"])
                old_text = gr.Textbox(label="…or paste the old contract", lines=8)
            with gr.Column(scale=1):
                new_file = gr.File(label="New contract", file_types=[".pdf", ".txt"])
                new_text = gr.Textbox(label="…or paste the new contract", lines=8)

        with gr.Row():
            backend = gr.Dropdown(choices=list(BACKENDS), value=DEFAULT_BACKEND, label="Extraction backend")
            mode = gr.Radio(
                choices=["structured", "lines"],
                value="structured",
                label="Comparison",
                info="Payout groups and contract terms, or a raw line-by-line diff.",
            )
            run_button = gr.Button("Compare", variant="primary")

        results = gr.HTML()

        run_button.click(
            fn=process_comparison,
            inputs=[old_file, new_file, old_text, new_text, backend, mode],
            outputs=[results],
        )

    return demo


def main() -> None:
    demo = build_demo()
    demo.queue()
    demo.launch()


if __name__ == "__main__":  # pragma: no cover
    main()
