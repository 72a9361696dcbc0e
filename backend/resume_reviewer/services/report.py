from __future__ import annotations

import html
from typing import Any, Dict, List, Optional

from resume_reviewer.core import CATEGORY_LABELS, DOCX_MIME, PDF_MIME, REQUIRED_SCORES
from resume_reviewer.models import LOADING, RESULTS, UPLOAD, AnalysisResult, Notification, ViewState
from resume_reviewer.services.animation import (
    CATEGORY_DURATION_MS,
    CIRCLE_RADIUS,
    CIRCUMFERENCE,
    OVERALL_DURATION_MS,
    as_number,
    circle_offset,
)

API_KEY_MASK = "••••••••••••••••"

STYLES = """
    :root {
      --bg: #070A12; --surface: #0B0F1A; --text: #E7E9EE; --muted: rgba(231,233,238,0.7);
      --accent: #5b5bff; --success: #00D084; --error: #ff5b5b; --gold: #D4AF37;
    }
    body {
      font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Arial;
      background: var(--bg); color: var(--text); margin: 0; padding: 24px;
    }
    .hidden { display: none !important; }
    .wrap { max-width: 980px; margin: 0 auto; }
    .topbar { display: flex; justify-content: space-between; align-items: center; margin-bottom: 18px; }
    .btn, .btn-primary {
      border: 1px solid rgba(255,255,255,0.15); background: rgba(255,255,255,0.04);
      color: var(--text); border-radius: 999px; padding: 8px 16px; cursor: pointer;
    }
    .btn.key-set { border-color: var(--success); }
    .btn-primary { background: var(--accent); border-color: var(--accent); padding: 12px 22px; }
    .upload-zone {
      border: 2px dashed rgba(255,255,255,0.15); border-radius: 18px; padding: 64px 24px;
      text-align: center; cursor: pointer; background: var(--surface);
    }
    .upload-zone.drag-over { border-color: var(--accent); }
    .muted { color: var(--muted); font-size: 13px; }
    .spinner {
      width: 48px; height: 48px; margin: 48px auto 16px; border-radius: 50%;
      border: 4px solid rgba(255,255,255,0.1); border-top-color: var(--accent);
      animation: spin 1s linear infinite;
    }
    @keyframes spin { to { transform: rotate(360deg); } }
    .overall-score { display: flex; justify-content: center; margin: 12px 0 18px; }
    .score-circle { position: relative; width: 200px; height: 200px; }
    .score-circle svg { transform: rotate(-90deg); }
    .score-circle-bg { fill: none; stroke: rgba(255,255,255,0.08); stroke-width: 12; }
    .score-circle-fill { fill: none; stroke: url(#score-gradient); stroke-width: 12;
      stroke-linecap: round; transition: stroke-dashoffset 1.5s ease-out; }
    .score-circle-text { position: absolute; inset: 0; display: flex; flex-direction: column;
      align-items: center; justify-content: center; }
    .score-circle-value { font-size: 48px; font-weight: 800; }
    .interview-probability { display: inline-block; padding: 8px 16px; border-radius: 999px;
      border: 1px solid rgba(212,175,55,0.35); color: var(--gold); }
    .section-heading { font-size: 18px; margin: 28px 0 12px; }
    .category-scores { display: grid; grid-template-columns: repeat(5, 1fr); gap: 10px; }
    .category-score, .insight-card, .recruiter-summary, .comparison-card {
      background: rgba(255,255,255,0.03); border: 1px solid rgba(255,255,255,0.08);
      border-radius: 16px; padding: 14px;
    }
    .category-score { text-align: center; }
    .category-score-value { font-size: 28px; font-weight: 800; color: var(--gold); }
    .recruiter-summary { margin-top: 18px; }
    .insights-grid { display: grid; grid-template-columns: 1fr 1fr; gap: 14px; }
    .insight-card.strengths h3 { color: var(--success); }
    .insight-card.weaknesses h3 { color: var(--error); }
    .bullet-comparisons { display: grid; gap: 10px; }
    .comparison-card { display: grid; grid-template-columns: 1fr 1fr; gap: 14px; }
    .comparison-label { font-size: 12px; color: var(--muted); margin-bottom: 6px; }
    .comparison-side.improved .comparison-text { color: var(--success); }
    .modal { position: fixed; inset: 0; background: rgba(0,0,0,0.6); display: flex;
      align-items: center; justify-content: center; z-index: 1000; }
    .modal-content { background: var(--surface); border-radius: 16px; padding: 24px; width: 420px;
      border: 1px solid rgba(255,255,255,0.1); }
    .modal-content input { width: 100%; box-sizing: border-box; padding: 10px; margin: 12px 0;
      border-radius: 10px; border: 1px solid rgba(255,255,255,0.15); background: var(--bg); color: var(--text); }
    .notifications { position: fixed; top: 2rem; right: 2rem; z-index: 2000; display: grid; gap: 8px; }
    .notification { background: var(--surface); border: 1px solid var(--error); border-left: 4px solid var(--error);
      border-radius: 10px; padding: 1rem 1.5rem; max-width: 400px; animation: slideIn 0.3s ease; }
    .notification.success { border-color: var(--success); border-left-color: var(--success); }
    @keyframes slideIn { from { transform: translateX(100%); opacity: 0; } to { transform: translateX(0); opacity: 1; } }
    @media (max-width: 820px) {
      .category-scores, .insights-grid, .comparison-card { grid-template-columns: 1fr; }
    }
"""

# Browser side of the page: drag-drop, modal toggling, banner expiry and the
# ease-out cubic counters (same curve and durations as services/animation.py).
SCRIPT = """
(function () {
  const $ = (id) => document.getElementById(id);
  const uploadZone = $('uploadZone'), fileInput = $('fileInput'), uploadForm = $('uploadForm');
  const modal = $('apiKeyModal'), keyInput = $('apiKeyInput');

  function showLoading(message) {
    $('uploadSection').classList.add('hidden');
    $('resultsSection').classList.add('hidden');
    $('loadingSection').classList.remove('hidden');
    $('loadingMessage').textContent = message;
  }

  function submitUpload() {
    showLoading('Extracting text from your resume...');
    uploadForm.submit();
  }

  if (uploadZone) {
    uploadZone.addEventListener('click', () => fileInput.click());
    fileInput.addEventListener('change', (e) => { if (e.target.files.length > 0) submitUpload(); });
    uploadZone.addEventListener('dragover', (e) => { e.preventDefault(); uploadZone.classList.add('drag-over'); });
    uploadZone.addEventListener('dragleave', () => uploadZone.classList.remove('drag-over'));
    uploadZone.addEventListener('drop', (e) => {
      e.preventDefault();
      uploadZone.classList.remove('drag-over');
      if (e.dataTransfer.files.length > 0) {
        fileInput.files = e.dataTransfer.files;
        submitUpload();
      }
    });
  }

  function closeModal() {
    modal.classList.add('hidden');
    keyInput.value = '';
    fetch('/api-key/close', { method: 'POST' });
  }

  $('apiKeyBtn').addEventListener('click', () => {
    modal.classList.remove('hidden');
    keyInput.value = modal.dataset.hasKey === 'true' ? keyInput.dataset.mask : '';
    keyInput.addEventListener('focus', () => {
      if (keyInput.value === keyInput.dataset.mask) keyInput.value = '';
    }, { once: true });
    setTimeout(() => keyInput.focus(), 100);
  });
  $('modalClose').addEventListener('click', closeModal);
  modal.addEventListener('click', (e) => { if (e.target === modal) closeModal(); });
  document.addEventListener('keydown', (e) => {
    if (e.key === 'Escape' && !modal.classList.contains('hidden')) closeModal();
  });

  document.querySelectorAll('.notification').forEach((el) => {
    setTimeout(() => el.remove(), parseInt(el.dataset.ttl, 10));
  });

  function animateNumber(el, start, end, duration) {
    const startTime = performance.now();
    const step = (now) => {
      const progress = Math.min((now - startTime) / duration, 1);
      const eased = 1 - Math.pow(1 - progress, 3);
      el.textContent = Math.floor(start + (end - start) * eased);
      if (progress < 1) requestAnimationFrame(step); else el.textContent = end;
    };
    requestAnimationFrame(step);
  }

  setTimeout(() => {
    document.querySelectorAll('[data-target]').forEach((el) => {
      animateNumber(el, 0, Number(el.dataset.target) || 0, parseInt(el.dataset.duration, 10));
    });
    const fill = document.querySelector('.score-circle-fill');
    if (fill) fill.style.strokeDashoffset = fill.dataset.finalOffset;
  }, 100);
})();
"""


def _esc(value: Any) -> str:
    if value is None:
        return ""
    return html.escape(str(value))


def _hidden(visible: bool) -> str:
    return "" if visible else " hidden"


def render_overall_score(score: Any) -> str:
    offset = circle_offset(score)
    return f"""
      <div class="overall-score">
        <div class="score-circle">
          <svg width="200" height="200" viewBox="0 0 200 200">
            <defs>
              <linearGradient id="score-gradient" x1="0%" y1="0%" x2="100%" y2="100%">
                <stop offset="0%" stop-color="#5b5bff"/>
                <stop offset="100%" stop-color="#00d4aa"/>
              </linearGradient>
            </defs>
            <circle class="score-circle-bg" cx="100" cy="100" r="{CIRCLE_RADIUS}"/>
            <circle class="score-circle-fill" cx="100" cy="100" r="{CIRCLE_RADIUS}"
                    stroke-dasharray="{CIRCUMFERENCE}"
                    stroke-dashoffset="{CIRCUMFERENCE}"
                    data-final-offset="{offset}"/>
          </svg>
          <div class="score-circle-text">
            <div class="score-circle-value" data-target="{as_number(score)}" data-duration="{OVERALL_DURATION_MS}">0</div>
            <div class="score-circle-label muted">Overall Score</div>
          </div>
        </div>
      </div>
    """


def render_interview_probability(probability: Any) -> str:
    return f"""
      <div style="text-align: center; margin-bottom: 2rem;">
        <div class="interview-probability">Interview Probability: {_esc(probability)}</div>
      </div>
    """


def render_category_scores(scores: Dict[str, Any]) -> str:
    cards = "".join(
        f"""
        <div class="category-score">
          <div class="category-score-value" data-target="{as_number(scores[key])}" data-duration="{CATEGORY_DURATION_MS}">0</div>
          <div class="category-score-label muted">{CATEGORY_LABELS[key]}</div>
        </div>
        """
        for key in REQUIRED_SCORES
    )
    return f"""
      <h2 class="section-heading">Category Breakdown</h2>
      <div class="category-scores">{cards}</div>
    """


def render_recruiter_summary(summary: Any) -> str:
    return f"""
      <div class="recruiter-summary">
        <h3>Recruiter's Take</h3>
        <p>{_esc(summary)}</p>
      </div>
    """


def _items(values: Any) -> List[Any]:
    if isinstance(values, (list, tuple)):
        return list(values)
    return [values] if values else []


def render_insights(strengths: Any, weaknesses: Any) -> str:
    def li(items):
        return "".join(f'<li class="insight-item">{_esc(x)}</li>' for x in _items(items))

    return f"""
      <h2 class="section-heading">Key Insights</h2>
      <div class="insights-grid">
        <div class="insight-card strengths">
          <h3>Top Strengths</h3>
          <ul class="insight-list">{li(strengths)}</ul>
        </div>
        <div class="insight-card weaknesses">
          <h3>Critical Weaknesses</h3>
          <ul class="insight-list">{li(weaknesses)}</ul>
        </div>
      </div>
    """


def render_bullet_comparisons(bullets: Any) -> str:
    bullets = [b for b in _items(bullets) if isinstance(b, dict)]
    if not bullets:
        return ""

    cards = "".join(
        f"""
        <div class="comparison-card">
          <div class="comparison-side original">
            <div class="comparison-label">Before</div>
            <div class="comparison-text">{_esc(b.get("original"))}</div>
          </div>
          <div class="comparison-side improved">
            <div class="comparison-label">After</div>
            <div class="comparison-text">{_esc(b.get("improved"))}</div>
          </div>
        </div>
        """
        for b in bullets
    )
    return f"""
      <h2 class="section-heading">Bullet Point Improvements</h2>
      <div class="bullet-comparisons">{cards}</div>
    """


def render_results(analysis: AnalysisResult) -> str:
    return f"""
      {render_overall_score(analysis["score_overall"])}
      {render_interview_probability(analysis["interview_probability"])}
      {render_category_scores(analysis["scores"])}
      {render_recruiter_summary(analysis["recruiter_summary"])}
      {render_insights(analysis["top_strengths"], analysis["critical_weaknesses"])}
      {render_bullet_comparisons(analysis["rewritten_bullets"])}
      <div style="text-align: center; margin-top: 3rem;">
        <a class="btn" href="/api/report.pdf">Download PDF Report</a>
        <form method="post" action="/reset" style="display: inline;">
          <button class="btn-primary" type="submit">Analyze Another Resume</button>
        </form>
      </div>
    """


def render_notifications(notifications: List[Notification]) -> str:
    items = "".join(
        f'<div class="notification {n.kind}" data-ttl="{n.ttl_ms}"><span>{_esc(n.message)}</span></div>'
        for n in notifications
    )
    return f'<div class="notifications">{items}</div>'


def render_page(
    state: ViewState,
    *,
    notifications: Optional[List[Notification]] = None,
    modal_open: bool = False,
    api_key_value: str = "",
    has_api_key: bool = False,
    title: str = "AI Resume Reviewer",
) -> str:
    results = render_results(state.analysis) if state.view == RESULTS and state.analysis else ""
    key_label = "API Key Set" if has_api_key else "API Key"
    key_class = "btn key-set" if has_api_key else "btn"
    accept = f"{PDF_MIME},{DOCX_MIME}"

    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <title>{_esc(title)}</title>
  <style>{STYLES}</style>
</head>
<body>
  {render_notifications(notifications or [])}
  <div class="wrap main-content">
    <div class="topbar">
      <h1 style="margin: 0; font-size: 22px;">{_esc(title)}</h1>
      <button id="apiKeyBtn" class="{key_class}" type="button">{key_label}</button>
    </div>

    <section id="uploadSection" class="{_hidden(state.view == UPLOAD).strip()}">
      <form id="uploadForm" method="post" action="/upload" enctype="multipart/form-data">
        <div id="uploadZone" class="upload-zone">
          <div style="font-size: 18px; font-weight: 700;">Drop your resume here or click to browse</div>
          <div class="muted">PDF or DOCX, up to 5MB</div>
          <input id="fileInput" name="resume" type="file" accept="{accept}" class="hidden"/>
        </div>
      </form>
    </section>

    <section id="loadingSection" class="{_hidden(state.view == LOADING).strip()}" style="text-align: center;">
      <div class="spinner"></div>
      <div id="loadingMessage" class="muted">{_esc(state.message)}</div>
    </section>

    <section id="resultsSection" class="{_hidden(state.view == RESULTS).strip()}">{results}</section>
  </div>

  <div id="apiKeyModal" class="modal{_hidden(modal_open)}" data-has-key="{str(has_api_key).lower()}">
    <div class="modal-content">
      <h3 style="margin-top: 0;">OpenAI API Key</h3>
      <div class="muted">Your key is stored locally and only sent to OpenAI.</div>
      <form method="post" action="/api-key">
        <input id="apiKeyInput" name="api_key" type="password" placeholder="sk-..." value="{_esc(api_key_value)}"
               data-mask="{API_KEY_MASK}" autocomplete="off"/>
        <button id="saveApiKey" class="btn-primary" type="submit">Save</button>
        <button id="clearApiKey" class="btn" type="submit" formaction="/api-key/clear">Clear</button>
        <button id="modalClose" class="btn" type="button">Close</button>
      </form>
    </div>
  </div>

  <script>{SCRIPT}</script>
</body>
</html>
"""
