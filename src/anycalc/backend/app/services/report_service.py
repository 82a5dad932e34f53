"""Render calculation results as CSV, HTML and PDF reports.

Renderers only reformat the mapping returned by ``calculate_capital_gains``;
they never recompute figures.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Mapping, Sequence
from html import escape
from io import StringIO
from typing import Any

from fpdf import FPDF
from fpdf.enums import XPos, YPos

REPORT_TITLE = "Capital Gains Report"

_REGIME_LABELS = {
    "old": "Old regime (indexed)",
    "new": "New regime (non-indexed)",
    "short_term": "Short-term",
}


def _format_currency(value: Any) -> str:
    number = float(value or 0)
    # Core PDF fonts are Latin-1 only, so the rupee sign is spelled out.
    return f"Rs {number:,.0f}"


def _format_percent(value: Any) -> str:
    number = float(value or 0)
    return f"{number * 100:.2f}%"


def _regime_label(result: Mapping[str, Any]) -> str:
    regime = str(result.get("regime", ""))
    label = _REGIME_LABELS.get(regime, regime)
    return f"{label} at {_format_percent(result.get('tax_rate'))}"


def _summary_rows(result: Mapping[str, Any]) -> list[tuple[str, str]]:
    meta = result.get("meta", {})
    holding = result.get("holding_period", {})
    index = result.get("cost_inflation_index", {})
    decision = result.get("regime_decision", {})
    active = result.get("active_result", {})

    term = "Long-term" if holding.get("is_long_term") else "Short-term"
    rows = [
        ("Rule year", str(meta.get("year", ""))),
        ("Asset type", str(meta.get("asset_type", "")).title()),
        (
            "Holding period",
            f"{holding.get('years', 0)} years {holding.get('remainder_months', 0)} months ({term})",
        ),
        ("Total acquisition cost", _format_currency(meta.get("total_acquisition_cost"))),
        ("Transfer expenses", _format_currency(meta.get("transfer_expenses"))),
        ("Net sale consideration", _format_currency(meta.get("net_sale_consideration"))),
        ("Purchase CII", _format_index(index.get("purchase", {}))),
        ("Sale CII", _format_index(index.get("sale", {}))),
        ("Indexed cost", _format_currency(index.get("indexed_cost"))),
        ("Active regime", str(decision.get("active_regime", ""))),
        ("Capital gain", _format_currency(active.get("capital_gain"))),
        ("Total tax", _format_currency(active.get("total_tax"))),
        ("Net proceeds", _format_currency(active.get("net_proceeds"))),
    ]
    if decision.get("mandatory_regime"):
        rows.append(("Mandatory regime", str(decision["mandatory_regime"])))
    elif decision.get("can_choose"):
        rows.append(("Recommended regime", str(decision.get("recommended", ""))))
    return rows


def _format_index(lookup: Mapping[str, Any]) -> str:
    if not lookup:
        return ""
    suffix = " (estimated)" if lookup.get("estimated") else ""
    return f"{lookup.get('value')} (FY {lookup.get('fiscal_year')}){suffix}"


def _regime_rows(result: Mapping[str, Any]) -> Iterable[tuple[str, list[tuple[str, str]]]]:
    for entry in result.get("regime_results", []):
        if not isinstance(entry, Mapping):
            continue
        yield _regime_label(entry), [
            ("Capital gain", _format_currency(entry.get("capital_gain"))),
            ("Tax before cess", _format_currency(entry.get("tax_before_cess"))),
            ("Cess", _format_currency(entry.get("cess"))),
            ("Total tax", _format_currency(entry.get("total_tax"))),
            ("Net proceeds", _format_currency(entry.get("net_proceeds"))),
        ]


def _strategy_rows(strategy: Mapping[str, Any]) -> list[tuple[str, str]]:
    rows = [
        ("Maximum exemption", _format_currency(strategy.get("max_exemption"))),
        ("Investment required", _format_currency(strategy.get("investment_required"))),
        ("Tax saved", _format_currency(strategy.get("tax_saved"))),
        ("Deadline", str(strategy.get("deadline", ""))),
        ("Lock-in", f"{strategy.get('lock_in_years', 0)} years"),
    ]

    projection = strategy.get("property_projection")
    if isinstance(projection, Mapping):
        baseline = projection.get("baseline", {})
        rows.extend(
            [
                ("Appreciation rate", _format_percent(projection.get("appreciation_rate"))),
                ("Projected value", _format_currency(projection.get("projected_value"))),
                ("Rental income", _format_currency(projection.get("rental_income"))),
                ("Tax on returns", _format_currency(projection.get("total_tax_on_returns"))),
                ("Net cash in hand", _format_currency(projection.get("net_cash_in_hand"))),
                ("Pay tax and invest instead", _format_currency(baseline.get("net_amount"))),
                ("Strategy is better", "Yes" if baseline.get("strategy_is_better") else "No"),
            ]
        )

    bond = strategy.get("bond_projection")
    if isinstance(bond, Mapping):
        rows.extend(
            [
                ("Interest rate", _format_percent(bond.get("interest_rate"))),
                ("Total interest", _format_currency(bond.get("total_interest"))),
                ("Tax on interest", _format_currency(bond.get("tax_on_interest"))),
                ("Net maturity value", _format_currency(bond.get("net_maturity_value"))),
            ]
        )
    return rows


def _strategy_title(strategy: Mapping[str, Any]) -> str:
    return f"Section {strategy.get('section', '')}: {strategy.get('name', '')}"


def _allocation_rows(allocation: Mapping[str, Any]) -> list[tuple[str, str]]:
    bonds = allocation.get("bonds", {})
    real_estate = allocation.get("real_estate", {})
    return [
        ("Net proceeds", _format_currency(allocation.get("net_proceeds"))),
        ("Personal use", _format_currency(allocation.get("personal_use_amount"))),
        ("Bonds", _format_currency(bonds.get("amount"))),
        (
            "Bonds net maturity value",
            _format_currency(bonds.get("projection", {}).get("net_maturity_value")),
        ),
        ("Real estate", _format_currency(real_estate.get("amount"))),
        ("Real estate net value", _format_currency(real_estate.get("net_value"))),
        ("Unallocated", _format_currency(allocation.get("unallocated"))),
        ("Total projected value", _format_currency(allocation.get("total_projected_value"))),
    ]


def _strategies(result: Mapping[str, Any]) -> Sequence[Mapping[str, Any]]:
    return [entry for entry in result.get("strategies", []) if isinstance(entry, Mapping)]


def _table(rows: Iterable[tuple[str, str]]) -> str:
    return "\n".join(
        f"<tr><th>{escape(label)}</th><td>{escape(value)}</td></tr>" for label, value in rows
    )


def render_html(result: Mapping[str, Any]) -> str:
    regime_cards = "".join(
        f"<article class=\"card\"><h3>{escape(label)}</h3><table>{_table(rows)}</table></article>"
        for label, rows in _regime_rows(result)
    )

    strategy_cards: list[str] = []
    for strategy in _strategies(result):
        notes = "".join(f"<li>{escape(str(note))}</li>" for note in strategy.get("notes", []))
        strategy_cards.append(
            f"<article class=\"card\"><h3>{escape(_strategy_title(strategy))}</h3>"
            f"<p>{escape(str(strategy.get('description', '')))}</p>"
            f"<table>{_table(_strategy_rows(strategy))}</table>"
            f"<ul>{notes}</ul></article>"
        )
    if not strategy_cards:
        strategy_cards.append("<p>No exemption strategies apply to this sale.</p>")

    allocation_html = ""
    allocation = result.get("allocation")
    if isinstance(allocation, Mapping):
        allocation_html = (
            "<section><h2>Reinvestment allocation</h2>"
            f"<table>{_table(_allocation_rows(allocation))}</table></section>"
        )

    return f"""<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <title>{REPORT_TITLE}</title>
    <style>
      body {{ font-family: 'Segoe UI', sans-serif; margin: 0; padding: 2rem; color: #212529; background: #f8f9fa; }}
      h1, h2, h3 {{ margin-top: 0; }}
      table {{ width: 100%; border-collapse: collapse; margin-bottom: 1rem; }}
      th, td {{ padding: 0.5rem; text-align: left; border-bottom: 1px solid #dee2e6; }}
      th {{ width: 50%; }}
      .card {{ background: #fff; border: 1px solid #dee2e6; border-radius: 0.5rem; padding: 1rem; margin-bottom: 1rem; }}
      footer {{ margin-top: 2rem; font-size: 0.9rem; color: #6c757d; }}
    </style>
  </head>
  <body>
    <header>
      <h1>{REPORT_TITLE}</h1>
    </header>
    <section>
      <h2>Summary</h2>
      <table>
        <tbody>
          {_table(_summary_rows(result))}
        </tbody>
      </table>
    </section>
    <section>
      <h2>Regime comparison</h2>
      {regime_cards}
    </section>
    <section>
      <h2>Exemption strategies</h2>
      {''.join(strategy_cards)}
    </section>
    {allocation_html}
    <footer>
      <p>Estimates only; confirm figures with a tax professional before filing.</p>
    </footer>
  </body>
</html>"""


def render_csv(result: Mapping[str, Any]) -> str:
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["Section", "Field", "Value"])
    for label, value in _summary_rows(result):
        writer.writerow(["Summary", label, value])

    for regime_label, rows in _regime_rows(result):
        for label, value in rows:
            writer.writerow([regime_label, label, value])

    for strategy in _strategies(result):
        title = _strategy_title(strategy)
        for label, value in _strategy_rows(strategy):
            writer.writerow([title, label, value])
        notes = strategy.get("notes", [])
        if notes:
            writer.writerow([title, "Notes", "; ".join(str(note) for note in notes)])

    allocation = result.get("allocation")
    if isinstance(allocation, Mapping):
        for label, value in _allocation_rows(allocation):
            writer.writerow(["Allocation", label, value])

    return buffer.getvalue()


def _pdf_rows(pdf: FPDF, rows: Iterable[tuple[str, str]]) -> None:
    for label, value in rows:
        pdf.multi_cell(pdf.epw, 6, f"{label}: {value}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _pdf_heading(pdf: FPDF, text: str) -> None:
    pdf.ln(3)
    pdf.set_font("Helvetica", style="B", size=12)
    pdf.cell(0, 8, text, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", size=10)


def render_pdf(result: Mapping[str, Any]) -> bytes:
    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()
    pdf.set_title(REPORT_TITLE)
    pdf.set_text_color(33, 37, 41)

    pdf.set_font("Helvetica", style="B", size=16)
    pdf.cell(0, 10, REPORT_TITLE, new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    _pdf_heading(pdf, "Summary")
    _pdf_rows(pdf, _summary_rows(result))

    _pdf_heading(pdf, "Regime comparison")
    for label, rows in _regime_rows(result):
        pdf.set_font("Helvetica", style="B", size=10)
        pdf.multi_cell(pdf.epw, 6, label, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font("Helvetica", size=10)
        _pdf_rows(pdf, rows)

    _pdf_heading(pdf, "Exemption strategies")
    strategies = _strategies(result)
    if not strategies:
        pdf.multi_cell(
            pdf.epw,
            6,
            "No exemption strategies apply to this sale.",
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )
    for strategy in strategies:
        pdf.set_font("Helvetica", style="B", size=10)
        pdf.multi_cell(
            pdf.epw, 6, _strategy_title(strategy), new_x=XPos.LMARGIN, new_y=YPos.NEXT
        )
        pdf.set_font("Helvetica", size=10)
        _pdf_rows(pdf, _strategy_rows(strategy))
        for note in strategy.get("notes", []):
            pdf.multi_cell(pdf.epw, 5, f"- {note}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    allocation = result.get("allocation")
    if isinstance(allocation, Mapping):
        _pdf_heading(pdf, "Reinvestment allocation")
        _pdf_rows(pdf, _allocation_rows(allocation))

    pdf.ln(6)
    pdf.multi_cell(
        0,
        6,
        "Estimates only; confirm figures with a tax professional before filing.",
    )

    output = pdf.output()
    if isinstance(output, (bytes, bytearray)):
        return bytes(output)
    return output.encode("latin1")


__all__ = ["REPORT_TITLE", "render_csv", "render_html", "render_pdf"]
