"""
📚 Novel Saver
Streamlit dashboard: start a scrape or save a single chapter page, watch progress,
pause/resume or stop it.

The orchestrator lives in st.cache_resource so it survives reruns and browser
reconnects; every rerun reconnects the dashboard as the progress observer
and immediately gets the latest snapshot replayed.
"""

import time

import streamlit as st

from novelsaver import (
    BatchScrapeOrchestrator,
    ChapterRangeError,
    ScrapeError,
    DirectoryWriter,
    FallbackDownloader,
    QueueObserver,
    get_downloads_dir,
    get_output_dir,
    load_scrape_config,
    parse_chapter_range,
    show_config_status,
)

REFRESH_SECONDS = 1.0

st.set_page_config(page_title="Novel Saver", page_icon="📚", layout="centered")


@st.cache_resource
def get_orchestrator():
    output_dir = get_output_dir()
    writer = DirectoryWriter(output_dir) if output_dir else None
    return BatchScrapeOrchestrator(writer=writer, downloader=FallbackDownloader(get_downloads_dir()),
                                   config=load_scrape_config())


orchestrator = get_orchestrator()

if "observer" not in st.session_state:
    st.session_state.observer = QueueObserver()
observer = st.session_state.observer
orchestrator.channel.connect(observer)

messages = observer.drain()
if messages:
    st.session_state.last_message = messages[-1]
last_message = st.session_state.get("last_message")

st.title("📚 Novel Saver")
st.caption(show_config_status(orchestrator.config))

# --- Start a scrape ---
with st.form("scrape_form"):
    url = st.text_input("Chapter list URL", placeholder="https://example.com/book/123/")
    chapter_range = st.text_input("Chapters (optional)", placeholder="e.g. 1-3,7 (leave empty for the whole book)")
    single_page = st.checkbox("Save this page only (the URL is a single chapter page)")
    submitted = st.form_submit_button("🚀 Start scraping", type="primary", disabled=orchestrator.is_running)

if submitted:
    if not url.strip():
        st.error("Please enter the URL of the chapter list page.")
    elif single_page:
        with st.spinner("Extracting chapter..."):
            try:
                filename = orchestrator.save_page(url.strip())
            except ScrapeError as e:
                st.error(f"💥 {e}")
            else:
                st.success(f"✅ Saved {filename}")
    else:
        try:
            chapters = parse_chapter_range(chapter_range) if chapter_range.strip() else None
        except ChapterRangeError as e:
            st.error(str(e))
        else:
            if chapters:
                response = orchestrator.scrape_chapters(url.strip(), chapters)
            else:
                response = orchestrator.scrape_book(url.strip())
            if response["success"]:
                st.session_state.last_message = None
                st.rerun()
            else:
                st.warning(f"⚠️ {response['message']}")

# --- Progress ---
if last_message:
    kind = last_message.get("type")
    total = last_message.get("total") or 0
    current = last_message.get("current") or 0
    title = last_message.get("bookTitle") or ""

    if kind == "progress":
        st.subheader(f"📖 {title}" if title else "📖 Scraping")
        st.progress(min(current / total, 1.0) if total else 0.0,
                    text=f"{current}/{total} · {last_message.get('status', '')}")
        st.caption(last_message.get("details", ""))
        if last_message.get("paused"):
            st.info("⏸️ Paused")
    elif kind == "complete":
        st.success(f"✅ {last_message.get('details', 'Done')}")
    elif kind == "stopped":
        st.warning(f"🛑 {last_message.get('details', 'Stopped')}")
    elif kind == "error":
        st.error(f"💥 {last_message.get('details', 'Scrape failed')}")

if orchestrator.is_running:
    col1, col2 = st.columns(2)
    with col1:
        paused = bool(last_message and last_message.get("paused"))
        if st.button("▶️ Resume" if paused else "⏸️ Pause", use_container_width=True):
            orchestrator.channel.receive({"action": "togglePause"})
            st.rerun()
    with col2:
        if st.button("🛑 Stop", use_container_width=True):
            orchestrator.channel.receive({"action": "stop"})
            st.rerun()

    time.sleep(REFRESH_SECONDS)
    st.rerun()
