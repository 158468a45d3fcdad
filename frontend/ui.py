"""
Streamlit frontend for University Search.

Talks to the FastAPI backend (API_URL, default http://localhost:8000) and
runs the filter / sort / score engine locally on the fetched catalog.

    streamlit run frontend/ui.py
"""

import sys
from pathlib import Path

import streamlit as st

# Make the project packages importable under `streamlit run`
sys.path.insert(0, str(Path(__file__).parent.parent))

from advisor.chat import ChatMessage, new_conversation
from app import config
from catalog import engine
from catalog.models import University
from frontend.api_client import ApiError, UniversityAPI
from frontend.comparison import MAX_ENTRIES, AddOutcome, ComparisonSet, LocalStorage, best_values

st.set_page_config(page_title="University Search", layout="wide")

api = UniversityAPI(config.API_URL)
comparison = ComparisonSet(LocalStorage(config.COMPARISON_FILE))

SORT_LABELS = {
    engine.SortOption.RANKING: "Ranking",
    engine.SortOption.TUITION_LOW: "Tuition: low to high",
    engine.SortOption.TUITION_HIGH: "Tuition: high to low",
    engine.SortOption.INTL_STUDENTS: "International students",
    engine.SortOption.BEST_FIT: "Best fit",
}


@st.cache_data(ttl=300)
def _load_catalog() -> list[dict]:
    return api.list_universities()


def _open_detail(slug: str) -> None:
    st.session_state["slug"] = slug
    st.session_state["page"] = "Details"


def _add_to_comparison(university: dict) -> None:
    notice = comparison.add(university)
    if notice.outcome is AddOutcome.FULL:
        st.error(f"**{notice.title}** — {notice.description}")
    elif notice.outcome is AddOutcome.DUPLICATE:
        st.info(f"**{notice.title}** — {notice.description}")
    else:
        st.success(f"**{notice.title}** — {notice.description}")


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------

def search_page(catalog: list[University]) -> None:
    st.title("Find Your Perfect University")

    query = st.text_input("Search", placeholder="Name, city or country")
    if query.strip():
        try:
            suggestions = api.search(query)[:5]
        except ApiError as exc:
            suggestions = []
            st.caption(f"Suggestions unavailable: {exc.message}")
        if suggestions:
            st.caption("Suggestions: " + ", ".join(s["name"] for s in suggestions))

    with st.sidebar:
        st.header("Filters")
        countries = st.multiselect("Country", engine.available_countries(catalog))
        tuition = st.slider(
            "Tuition (USD / year)",
            min_value=int(engine.DEFAULT_TUITION_RANGE[0]),
            max_value=int(engine.DEFAULT_TUITION_RANGE[1]),
            value=(int(engine.DEFAULT_TUITION_RANGE[0]), int(engine.DEFAULT_TUITION_RANGE[1])),
            step=1000,
        )
        levels = st.multiselect("Degree level", ["Bachelor", "Master", "PhD"])
        majors = st.multiselect("Strong majors", engine.available_majors(catalog))
        has_grant = st.checkbox("Scholarships available")

    filters = engine.FilterOptions(
        countries=countries,
        tuition_range=tuition,
        degree_levels=levels,
        majors=majors,
        has_grant=has_grant,
    )
    sort = st.selectbox("Sort by", list(SORT_LABELS), format_func=SORT_LABELS.get)

    results = engine.apply(catalog, query, filters, sort)
    st.caption(f"{len(results)} universities" + (" (filtered)" if filters.is_active() else ""))

    for u in results:
        with st.container(border=True):
            left, right = st.columns([4, 1])
            left.subheader(f"#{u.rating}  {u.name}")
            left.write(f"{u.city}, {u.country_full} — ${u.tuition_annual_usd:,.0f}/yr")
            if u.tagline:
                left.caption(u.tagline)
            if sort == engine.SortOption.BEST_FIT:
                left.caption(f"Fit score: {engine.best_fit_score(u):.1f}")
            right.button("Details", key=f"detail-{u.id}", on_click=_open_detail, args=(u.slug,))
            if right.button("Compare", key=f"compare-{u.id}"):
                _add_to_comparison(u.to_json())


def detail_page() -> None:
    slug = st.session_state.get("slug")
    if not slug:
        st.info("Pick a university from the search page.")
        return

    try:
        data = api.get_university(slug)
    except ApiError as exc:
        st.error(exc.message)
        return
    if data is None:
        st.error("University not found")
        return

    u = University.model_validate(data)
    st.title(u.name)
    st.caption(u.tagline)
    cols = st.columns(4)
    cols[0].metric("Ranking", f"#{u.rating}")
    cols[1].metric("Tuition (USD)", f"${u.tuition_annual_usd:,.0f}")
    cols[2].metric("International", f"{u.international_students_percent:g}%")
    cols[3].metric("Employment", f"{u.employment_rate:g}%" if u.employment_rate is not None else "N/A")

    if st.button("Add to comparison"):
        _add_to_comparison(data)

    st.write(u.summary)
    st.write(f"**Location:** {u.city}, {u.country_full}" + (f" · founded {u.founded}" if u.founded else ""))
    st.write(f"**Degree levels:** {', '.join(u.degree_levels)}")
    st.write(f"**Strong majors:** {', '.join(u.strong_majors)}")
    st.write(f"**Languages:** {', '.join(u.languages)}")
    if u.website:
        st.write(f"**Website:** {u.website}")

    st.subheader("Admission requirements")
    for label, req in (("Bachelor", u.admission_requirements.bachelor), ("Master", u.admission_requirements.master)):
        with st.expander(label):
            st.write(f"**GPA:** {req.gpa}")
            st.write(f"**Standardized tests:** {req.standardized_tests}")
            st.write(f"**English proficiency:** {req.english_proficiency}")
            st.write(f"**Additional:** {req.additional_requirements}")
            st.write(f"**Deadline:** {req.application_deadline}")

    if u.deadlines:
        st.subheader("Deadlines")
        st.dataframe(
            [
                {
                    "Level": d.level,
                    "Term": d.term,
                    "Round": d.round_name,
                    "Date": d.deadline_date or "TBA",
                    "Notes": d.notes,
                }
                for d in u.deadlines
            ],
            use_container_width=True,
            hide_index=True,
        )

    if u.cases:
        st.subheader("Alumni success")
        for case in u.cases:
            st.markdown(f"**{case.title}** — {case.summary}" + (f" ([link]({case.link}))" if case.link else ""))


def compare_page() -> None:
    st.title("Compare Universities")
    entries = comparison.entries
    if not entries:
        st.info("No universities to compare. Add universities from the search results to compare them side by side.")
        return

    best = best_values(entries)
    rows = {
        "Ranking": ("rating", "#{:g}"),
        "Tuition (USD)": ("tuitionAnnualUSD", "${:,.0f}"),
        "International students": ("internationalStudentsPercent", "{:g}%"),
    }

    cols = st.columns(len(entries))
    for col, u in zip(cols, entries):
        with col:
            st.subheader(u["name"])
            st.caption(f"{u['city']}, {u['countryFull']}")
            for label, (field, fmt) in rows.items():
                value = u.get(field)
                text = fmt.format(value) if value is not None else "N/A"
                if value is not None and value == best[field]:
                    text += "  ★"
                st.write(f"**{label}:** {text}")
            st.write(f"**Scholarships:** {'Yes' if u.get('hasGrant') else 'No'}")
            st.write(f"**Strong majors:** {', '.join(u.get('strongMajors', []))}")
            if st.button("Remove", key=f"remove-{u['id']}"):
                comparison.remove(u["id"])
                st.rerun()

    if st.button("Clear all"):
        comparison.clear()
        st.rerun()


def advisor_page() -> None:
    st.title("AI University Advisor")

    if "messages" not in st.session_state:
        st.session_state["messages"] = [m.model_dump() for m in new_conversation()]
        st.session_state["ai_available"] = True

    for m in st.session_state["messages"]:
        with st.chat_message(m["role"]):
            st.markdown(m["content"])

    prompt = st.chat_input(
        "Ask about universities…",
        disabled=not st.session_state["ai_available"],
    )
    if not prompt or not prompt.strip():
        return

    history = list(st.session_state["messages"])
    st.session_state["messages"].append(ChatMessage(role="user", content=prompt).model_dump())
    with st.spinner("Thinking…"):
        try:
            reply = api.chat(prompt, history)
        except ApiError as exc:
            if exc.is_configuration_error:
                st.session_state["ai_available"] = False
                reply = "AI Advisor is not configured. Please contact the administrator to set up the OpenAI API key."
            else:
                reply = "Sorry, I encountered an error. Please try again."
    st.session_state["messages"].append(ChatMessage(role="assistant", content=reply).model_dump())
    st.rerun()


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

PAGES = ("Search", "Details", "Compare", "Advisor")

if "page" not in st.session_state:
    st.session_state["page"] = "Search"

page = st.sidebar.radio("Page", PAGES, key="page")
st.sidebar.caption(f"Comparing {len(comparison)}/{MAX_ENTRIES}")

if page == "Advisor":
    advisor_page()
elif page == "Compare":
    compare_page()
elif page == "Details":
    detail_page()
else:
    try:
        catalog = [University.model_validate(d) for d in _load_catalog()]
    except ApiError as exc:
        st.error(f"{exc.message}. Start it with: python app/app.py")
        st.stop()
    search_page(catalog)
