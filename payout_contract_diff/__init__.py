"""
Payout contract comparison toolkit.

This package extracts text from two versions of an affiliate payout contract,
parses payout condition groups and contract terms out of it, and reports what
changed between the versions as HTML or JSON, from the command line or a
Gradio UI.
"""

__all__ = [
    "comparison_pipeline",
    "contract_diff",
    "contract_parser",
    "generate_synthetic_contracts",
    "line_diff",
    "pdf_text",
    "report",
]
