"""
trustscan - Streamlit Dashboard
Run a trust & hygiene scan from the browser and explore the report.

    streamlit run app.py
"""

import json
import logging
import os
import subprocess
import tempfile
from datetime import datetime

import pandas as pd
import streamlit as st
from dotenv import load_dotenv

load_dotenv()


@st.cache_resource
def ensure_chromium() -> bool:
    """Download the Playwright Chromium build once per server process."""
    try:
        proc = subprocess.run(
            ["playwright", "install", "chromium"],
            capture_output=True, text=True, timeout=300,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logging.getLogger(__name__).warning(f"Chromium install skipped: {e}")
        return False
    return proc.returncode == 0


chromium_ready = ensure_chromium()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from trustscan.auth.variants import BasicAuth, parse_auth
from trustscan.coordinator import run_scan
from trustscan.errors import InvalidURLError, SessionError
from trustscan.markdown_exporter import render_markdown
from trustscan.models import FinalReport, Severity, TrustSummary
from trustscan.run_config import ScanConfig, Settings, default
from trustscan.scoring import WEIGHTS
from trustscan.utils import report_base_name
from trustscan.word_exporter import export_docx

st.set_page_config(
    page_title="trustscan",
    page_icon="🛡️",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header { font-size: 2.4rem; font-weight: 700; color: #0F172A; margin-bottom: 0.4rem; }
    .sub-header { font-size: 1rem; color: #475569; margin-bottom: 1.5rem; }
    section[data-testid="stSidebar"] { background: #F1F5F9; }
    div[data-testid="stMetric"] {
        background: #F8FAFC;
        border: 1px solid #CBD5E1;
        border-radius: 8px;
        padding: 0.6rem 0.8rem;
    }
    div[data-testid="stMetricValue"] { color: #0F766E; }
    .stDownloadButton button { color: #0F766E; border-color: #99F6E4; }
</style>
""", unsafe_allow_html=True)

_TRUST_BADGES = {
    TrustSummary.HIGH: st.success,
    TrustSummary.MODERATE: st.warning,
    TrustSummary.LOW: st.error,
}
MAX_LOG_LINES = 100


def init_session_state():
    st.session_state.setdefault("scan_report", None)
    st.session_state.setdefault("scan_logs", [])


def add_log(message: str):
    stamped = f"[{datetime.now():%H:%M:%S}] {message}"
    st.session_state.scan_logs = (st.session_state.scan_logs + [stamped])[-MAX_LOG_LINES:]


def build_auth(options: dict):
    """Turn the sidebar auth inputs into an auth variant (or None)."""
    mode = options['auth_mode']
    if mode == "Form login":
        auth = BasicAuth.from_env(options['login_url'], options['username'], options['password'])
        return auth if auth.is_complete else None
    if mode == "Session cookies":
        payload = json.loads(options['auth_json'] or "{}")
        if not isinstance(payload, dict):
            raise ValueError("expected a JSON object with cookies and/or localStorage")
        return parse_auth({"type": "cookies", **payload})
    return None


def export_to_docx(report: FinalReport) -> bytes:
    with tempfile.TemporaryDirectory() as workdir:
        path = export_docx(report, os.path.join(workdir, "report.docx"), include_toc=False)
        with open(path, "rb") as f:
            return f.read()


def render_sidebar() -> dict:
    st.sidebar.markdown("## ⚙️ Scan Settings")

    max_pages = st.sidebar.number_input(
        "Max Pages to Scan",
        min_value=1,
        max_value=500,
        value=default('max_pages'),
        help="The scan stops once this many pages have been visited"
    )
    max_depth = st.sidebar.slider(
        "Max Link Depth",
        min_value=0,
        max_value=10,
        value=default('max_depth'),
        help="0 scans only the start page"
    )
    use_cache = st.sidebar.checkbox(
        "Use cached reports",
        value=True,
        help="Serve a fresh cached report for the same URL and limits"
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown("## 🔐 Authentication")
    auth_mode = st.sidebar.selectbox(
        "Mode",
        options=["None", "Form login", "Session cookies"],
        help="Authenticated scans are never cached"
    )
    login_url = username = password = auth_json = ""
    if auth_mode == "Form login":
        login_url = st.sidebar.text_input("Login URL")
        username = st.sidebar.text_input("Username")
        password = st.sidebar.text_input("Password", type="password")
    elif auth_mode == "Session cookies":
        auth_json = st.sidebar.text_area(
            "Session (JSON)",
            placeholder='{"cookies": [{"name": "session", "value": "...", "domain": "example.com"}], '
                        '"localStorage": {"token": "..."}}'
        )

    if not chromium_ready:
        st.sidebar.caption("⚠️ Playwright Chromium could not be installed; scans will fail.")

    return {
        'max_pages': int(max_pages),
        'max_depth': int(max_depth),
        'use_cache': use_cache,
        'auth_mode': auth_mode,
        'login_url': login_url,
        'username': username,
        'password': password,
        'auth_json': auth_json,
    }


def render_summary(report: FinalReport):
    st.markdown("---")
    st.markdown("## 📊 Trust Summary")

    badge = _TRUST_BADGES.get(report.trust_summary, st.info)
    badge(f"**{report.trust_summary.value}** — {report.closing_insight}")

    cols = st.columns(4)
    cols[0].metric("Hygiene Score", f"{report.score.total}/100")
    cols[1].metric("Pages Scanned", report.pages_scanned)
    cols[2].metric("Issues", len(report.issues))
    cols[3].metric("Critical", len(report.critical_issues))

    st.markdown("### Score Breakdown")
    breakdown = pd.DataFrame([
        {
            'Category': bucket.value,
            'Score': value,
            'Weight': WEIGHTS[bucket],
        }
        for bucket, value in report.score.breakdown.items()
    ])
    st.dataframe(breakdown, width="stretch", hide_index=True)
    st.bar_chart(breakdown.set_index('Category')['Score'])


def render_issues(report: FinalReport):
    st.markdown("## 🐞 Issues")
    if not report.issues:
        st.info("No issues found.")
        return

    df = pd.DataFrame([
        {
            'Severity': issue.severity.value,
            'Category': issue.category.value,
            'Page': issue.url,
            'Description': issue.description,
            'Remediation': issue.remediation,
            'Location': issue.location or "",
        }
        for issue in report.issues
    ])

    col1, col2 = st.columns(2)
    with col1:
        severities = st.multiselect(
            "Severity",
            options=[s.value for s in Severity],
            default=[s.value for s in Severity],
        )
    with col2:
        categories = st.multiselect(
            "Category",
            options=sorted(df['Category'].unique()),
            default=sorted(df['Category'].unique()),
        )
    filtered = df[df['Severity'].isin(severities) & df['Category'].isin(categories)]
    st.dataframe(filtered, width="stretch", hide_index=True)

    counts = df.groupby(['Category', 'Severity']).size().unstack(fill_value=0)
    st.bar_chart(counts)


def render_recommendations(report: FinalReport):
    st.markdown("## 🛠️ Recommendations")
    recs = report.recommendations
    for title, items in (
        ("Immediate", recs.immediate),
        ("Short Term", recs.short_term),
        ("Long Term", recs.long_term),
    ):
        unique = list(dict.fromkeys(i for i in items if i))
        with st.expander(f"{title} ({len(unique)})", expanded=title == "Immediate"):
            if not unique:
                st.write("Nothing to do.")
            for item in unique:
                st.write(f"- {item}")


def render_graph(report: FinalReport):
    st.markdown("## 🕸️ Crawled Pages")
    if not report.knowledge_graph:
        return
    df = pd.DataFrame([
        {
            'Page': node.id,
            'Path': node.label,
            'Depth': node.properties.get('depth'),
            'Issues': node.properties.get('issueCount', 0),
            'Links': len(node.edges),
        }
        for node in report.knowledge_graph
    ])
    st.dataframe(df, width="stretch", hide_index=True)


def render_downloads(report: FinalReport):
    st.markdown("### 📥 Download Report")
    base_name = report_base_name(report.start_url)
    col1, col2, col3 = st.columns(3)
    with col1:
        st.download_button(
            label="📥 Download Markdown",
            data=render_markdown(report),
            file_name=f"{base_name}.md",
            mime="text/markdown"
        )
    with col2:
        st.download_button(
            label="📥 Download JSON",
            data=json.dumps(report.to_dict(), indent=2, ensure_ascii=False),
            file_name=f"{base_name}.json",
            mime="application/json"
        )
    with col3:
        st.download_button(
            label="📥 Download DOCX",
            data=export_to_docx(report),
            file_name=f"{base_name}.docx",
            mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document"
        )


def start_scan(url: str, options: dict):
    try:
        config = ScanConfig.from_request(
            url,
            max_pages=options['max_pages'],
            max_depth=options['max_depth'],
            auth=build_auth(options),
        )
    except InvalidURLError as e:
        st.error(f"Invalid URL: {e}")
        return
    except ValueError as e:
        st.error(f"Invalid authentication settings: {e}")
        return

    st.session_state.scan_report = None
    st.session_state.scan_logs = []
    add_log(f"Starting scan of {config.start_url}")
    add_log(f"Max pages: {config.max_pages}, Max depth: {config.max_depth}")

    progress_bar = st.progress(0.0)
    status = st.empty()

    def progress_callback(pages_done: int, current_url: str, stats: dict):
        progress_bar.progress(min(pages_done / max(config.max_pages, 1), 1.0))
        status.write(f"**Scanned {pages_done}/{config.max_pages}:** {current_url}")
        add_log(f"Scanned {current_url} ({stats.get('queued', 0)} queued)")

    try:
        with st.spinner("Scanning..."):
            report = run_scan(
                config,
                Settings.from_env(),
                use_cache=options['use_cache'],
                progress_callback=progress_callback,
            )
        st.session_state.scan_report = report
        add_log(f"Scan complete: {report.score.total}/100, {len(report.issues)} issues")
    except SessionError as e:
        st.error(f"Browser could not start: {e}")
        add_log(f"Error: {e}")
        logger.exception("Scan failed")
    finally:
        progress_bar.empty()
        status.empty()


def main():
    init_session_state()

    st.markdown('<p class="main-header">🛡️ trustscan</p>', unsafe_allow_html=True)
    st.markdown(
        '<p class="sub-header">Website trust & hygiene scanner</p>',
        unsafe_allow_html=True
    )

    options = render_sidebar()

    col1, col2 = st.columns([4, 1])
    with col1:
        url = st.text_input(
            "Website URL",
            placeholder="https://example.com",
            label_visibility="collapsed"
        )
    with col2:
        scan_button = st.button("🚀 Start Scan", type="primary")

    if scan_button:
        if not url:
            st.error("Please enter a URL to scan")
        else:
            start_scan(url, options)

    report = st.session_state.scan_report
    if report:
        render_summary(report)
        render_issues(report)
        render_recommendations(report)
        render_graph(report)
        render_downloads(report)

    if st.session_state.scan_logs:
        with st.expander("📋 Scan Logs", expanded=False):
            st.code("\n".join(st.session_state.scan_logs[-50:]), language=None)


if __name__ == "__main__":
    main()
