"""Print-friendly HTML rendering of a booking, with an embedded QR code."""

import base64
import io
from datetime import datetime
from html import escape
from typing import Any
from urllib.parse import quote

import qrcode
import qrcode.image.svg

from core.models import BookingRecord

STAFF_CATEGORIES = ("production", "permanent", "temporary", "migrant", "contractors", "homeworkers", "management")

_CSS = """
  :root { --brand:#62BBC1; --ink:#0b0b0c; --muted:#5b6776; --line:#e5e7eb; --soft:#f7f8fa; }
  @page { size: A4; margin: 16mm 14mm; }
  body { color:var(--ink); font: 12.5px/1.5 -apple-system, system-ui, Segoe UI, Roboto, Arial, sans-serif; }
  .hd { display:flex; align-items:center; justify-content:space-between;
        padding-bottom:10px; border-bottom:3px solid var(--brand); margin-bottom:14px; }
  .title { margin:0; font-size:18px; }
  .subtle, .small { color:var(--muted); font-size:11.5px; }
  .qr { padding:6px; border:1px solid var(--line); border-radius:12px; }
  .section { margin-top:16px; }
  .section h2 { font-size:13.5px; margin:0 0 8px; padding-bottom:6px; border-bottom:1px solid var(--line); }
  .badge { display:inline-block; min-width:22px; text-align:center; border-radius:999px;
           background:#dff1f2; color:#05545a; font-weight:600; font-size:11.5px; }
  .grid2 { display:grid; grid-template-columns:1fr 1fr; gap:12px; }
  .card { border:1px solid var(--line); border-radius:12px; padding:10px 12px; }
  table { width:100%; border-collapse:collapse; }
  th, td { font-size:12px; vertical-align:top; padding:7px 9px; border:1px solid var(--line); }
  th { background:var(--soft); text-align:left; width:32%; }
  .mono { font-family: ui-monospace, SFMono-Regular, Menlo, monospace; }
  .sig { height:42px; object-fit:contain; }
  @media print { .no-print { display:none !important; } }
"""


def booking_url(base_url: str, ref_id: str) -> str:
    return f"{base_url.rstrip('/')}/?ref={quote(ref_id, safe='')}"


def make_qr_data_url(value: str) -> str:
    img = qrcode.make(value, image_factory=qrcode.image.svg.SvgPathImage, border=1, box_size=4)
    buf = io.BytesIO()
    img.save(buf)
    return "data:image/svg+xml;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def _e(value: Any) -> str:
    return escape("" if value is None else str(value))


def _block(form: dict[str, Any], name: str) -> dict[str, Any]:
    value = form.get(name)
    return value if isinstance(value, dict) else {}


def _count(staff: dict[str, Any], category: str, sex: str) -> int:
    try:
        return int((staff.get(category) or {}).get(sex) or 0)
    except (TypeError, ValueError, AttributeError):
        return 0


def _party_card(title: str, party: dict[str, Any], with_gps: bool = False) -> str:
    gps = f'<div class="small">GPS: {_e(party["gps"])}</div>' if with_gps and party.get("gps") else ""
    return f"""
      <div class="card">
        <b>{title}</b><br>
        <div class="small">{_e(party.get("company"))}</div>
        <div class="small">{_e(party.get("address"))}</div>
        <div class="small"><b>{_e(party.get("contact"))}</b> · {_e(party.get("title"))}</div>
        <div class="small">{_e(party.get("phone"))} · {_e(party.get("email"))}</div>
        {gps}
      </div>"""


def _meta_rows(meta: dict[str, Any]) -> str:
    audit_type = _e(meta.get("auditType"))
    if meta.get("auditType") == "Other":
        audit_type += f" — {_e(meta.get('auditTypeOther'))}"
    if meta.get("fulfillment") == "Fixed":
        when = _e(meta.get("auditDate"))
    else:
        when = f"{_e(meta.get('windowStart'))} → {_e(meta.get('windowEnd'))}"
    services = meta.get("services") if isinstance(meta.get("services"), list) else []
    return f"""
      <tr><th>Service Type</th><td>{audit_type}</td></tr>
      <tr><th>Fulfillment</th><td>{_e(meta.get("fulfillment"))} — {when}</td></tr>
      <tr><th>Requested Services</th><td>{_e(", ".join(str(s) for s in services))}</td></tr>
      <tr><th>Clients expected</th><td>{_e(meta.get("clientsExpected"))}</td></tr>
      <tr><th>Platform Ref / Site</th><td>{_e(meta.get("platformRef"))} · {_e(meta.get("platformSite"))}</td></tr>
      <tr><th>Factory / Requester ID</th><td>{_e(meta.get("factoryOrRequesterId"))}</td></tr>"""


def _staff_rows(staff: dict[str, Any]) -> str:
    rows = [
        f"<tr><td>{_e(c)}</td><td>{_count(staff, c, 'male')}</td><td>{_count(staff, c, 'female')}</td></tr>"
        for c in STAFF_CATEGORIES
    ]
    total_male = sum(_count(staff, c, "male") for c in STAFF_CATEGORIES)
    total_female = sum(_count(staff, c, "female") for c in STAFF_CATEGORIES)
    rows.append(f"<tr><th>Total</th><th>{total_male}</th><th>{total_female}</th></tr>")
    return "\n".join(rows)


def _signature(url: Any) -> str:
    return f'<div><img class="sig" src="{_e(url)}" alt="signature"></div>' if url else ""


def render_booking_html(record: BookingRecord, qr_data_url: str, generated_at: datetime) -> str:
    form = record.form
    meta = _block(form, "meta")
    special = _block(form, "special")
    ack = _block(form, "ack")
    terms = record.terms
    ref = _e(record.ref_id)

    notes = ""
    if special.get("details"):
        notes = f"""
    <div class="card" style="margin-top:10px;">
      <b>Special Conditions / Notes</b>
      <div class="small" style="margin-top:4px;">{_e(special["details"])}</div>
    </div>"""

    terms_line = f"Terms accepted: <b>{'YES' if terms and terms.accepted else 'NO'}</b>"
    if terms and terms.version:
        terms_line += f" · Version: {_e(terms.version)}"
    if terms and terms.url:
        terms_line += f" · {_e(terms.url)}"

    return f"""<!doctype html>
<html><head>
<meta charset="utf-8">
<title>Booking {ref}</title>
<meta name="viewport" content="width=device-width, initial-scale=1">
<style>{_CSS}</style>
</head>
<body onload="setTimeout(()=>window.print(), 50)">
  <div class="hd">
    <div>
      <h1 class="title">Greenleaf — Service Booking</h1>
      <div class="subtle">EFNET-QMS 005 · v3.0 · Generated {_e(generated_at.strftime("%Y-%m-%d %H:%M UTC"))}</div>
    </div>
    <div class="qr"><img src="{qr_data_url}" alt="QR" width="110" height="110"></div>
  </div>

  <div class="card" style="margin-bottom:10px;">
    <div class="small">
      <b>Reference:</b> <span class="mono">{ref}</span>
      &nbsp;·&nbsp;<b>Created:</b> {_e(record.ts)}
      &nbsp;·&nbsp;<b>Locked:</b> {"YES" if record.locked else "NO"}
    </div>
  </div>

  <section class="section">
    <h2><span class="badge">1</span> Audit Information &amp; Platform Data</h2>
    <table>{_meta_rows(meta)}
    </table>
  </section>

  <section class="section">
    <h2><span class="badge">2</span> Parties &amp; Contacts</h2>
    <div class="grid2">{_party_card("Requester (Lead Account)", _block(form, "requester"), with_gps=True)}{_party_card("Supplier / Factory", _block(form, "supplier"), with_gps=True)}
    </div>
    <div class="grid2" style="margin-top:12px;">{_party_card("Vendor / Trading", _block(form, "vendor"))}{_party_card("Buyer / Billing", _block(form, "buyer"))}
    </div>
  </section>

  <section class="section">
    <h2><span class="badge">3</span> Manday &amp; Special Conditions</h2>
    <table>
      <thead><tr><th style="width:40%">Category</th><th>Male</th><th>Female</th></tr></thead>
      <tbody>
{_staff_rows(_block(form, "staffCounts"))}
      </tbody>
    </table>{notes}
  </section>

  <section class="section">
    <h2><span class="badge">4</span> Acknowledgements</h2>
    <table>
      <tr><th style="width:50%">Requester</th><th style="width:50%">Greenleaf</th></tr>
      <tr>
        <td>
          <div class="small"><b>Name:</b> {_e(ack.get("requesterName"))}</div>
          <div class="small"><b>Title/Role:</b> {_e(ack.get("requesterTitle"))}</div>
          <div class="small"><b>Date:</b> {_e(ack.get("requesterDate"))}</div>
          {_signature(ack.get("requesterSignatureUrl"))}
        </td>
        <td>
          <div class="small"><b>Name:</b> {_e(ack.get("glaName"))}</div>
          <div class="small"><b>Date:</b> {_e(ack.get("glaDate"))}</div>
          {_signature(ack.get("glaSignatureUrl"))}
        </td>
      </tr>
    </table>
  </section>

  <p class="small" style="margin-top:10px;">{terms_line}</p>
  <p class="small" style="margin-top:6px;">
    © {generated_at.year} Greenleaf Assurance · Reference <span class="mono">{ref}</span>
  </p>
</body></html>"""
