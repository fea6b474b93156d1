"""Streamlit UI for SeatingAnnealer with CSV previews and validations."""
from __future__ import annotations

# Add src to sys.path so seating_annealer can be found
import sys
import os
import io
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

import pandas as pd
import streamlit as st
import streamlit.components.v1 as components

from seating_annealer.annealer import anneal
from seating_annealer.config import MAX_LADDER_SIZE, AnnealConfig
from seating_annealer.csv_loader import load_companions, load_people, load_tables
from seating_annealer.models import Problem
from seating_annealer.objectives import ObjectiveKind, summarize
from seating_annealer.report import table_report

# -----------------------------
# Helpers
# -----------------------------

def uploadedfile_to_df(uploaded_file) -> pd.DataFrame | None:
    """Read a Streamlit UploadedFile or file-like object into a DataFrame."""
    if uploaded_file is None:
        return None
    if hasattr(uploaded_file, "read"):
        uploaded_file.seek(0)
        return pd.read_csv(io.StringIO(uploaded_file.read().decode("utf-8")))
    return pd.read_csv(uploaded_file)

def df_to_csvio(df: pd.DataFrame) -> io.StringIO:
    """Serialize a DataFrame to a StringIO CSV buffer positioned at start."""
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    buf.seek(0)
    return buf

def validate_columns(df: pd.DataFrame, required: list[str], file_label: str) -> bool:
    """Check required columns and show an error if any are missing."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        st.error(f"Error in {file_label}: missing columns: {', '.join(missing)}")
        return False
    return True

def validate_headcount(people_df: pd.DataFrame, tables_df: pd.DataFrame) -> bool:
    """Ensure the tables seat exactly everyone."""
    total = int(tables_df["capacity"].sum())
    if total != len(people_df):
        st.error(
            f"Error: tables seat {total} people but people.csv lists {len(people_df)}. "
            "Every seat must be filled."
        )
        return False
    return True

def build_and_solve(
    people_df: pd.DataFrame,
    tables_df: pd.DataFrame,
    companions_df: pd.DataFrame | None,
    config: AnnealConfig,
):
    """Run loaders, build the problem, and anneal."""
    people = load_people(df_to_csvio(people_df))
    capacities = load_tables(df_to_csvio(tables_df))
    companions = []
    if companions_df is not None:
        companions = load_companions(df_to_csvio(companions_df), {p.name for p in people})
    problem = Problem(people=people, capacities=capacities, companions=companions)
    return problem, anneal(problem, config)

# -----------------------------
# Sidebar options
# -----------------------------

defaults = AnnealConfig()
st.sidebar.header("Annealing Options")
objective = st.sidebar.selectbox(
    "Objective",
    [k.value for k in ObjectiveKind],
    index=[k.value for k in ObjectiveKind].index(defaults.objective.value),
    help="sum: most satisfied preferences. count: most people with at least one. hybrid: count first, then sum.",
)
base_temperature = st.sidebar.number_input("Base temperature", min_value=0.0, value=defaults.base_temperature,
                                           format="%.5f")
final_temperature = st.sidebar.number_input("Final temperature", min_value=0.0, value=defaults.final_temperature,
                                            format="%.5f")
cooling_rate = st.sidebar.slider("Cooling rate", min_value=0.01, max_value=0.99, value=defaults.cooling_rate)
internal_iterations = st.sidebar.number_input("Iterations per round", min_value=1, value=defaults.internal_iterations)
swap_count = st.sidebar.number_input("Swaps per neighbour", min_value=1, value=defaults.swap_count)
ladder_size = st.sidebar.number_input("Concurrent annealers", min_value=1, max_value=MAX_LADDER_SIZE,
                                      value=defaults.ladder_size)
use_processes = st.sidebar.checkbox(
    "Run annealers in separate processes",
    value=defaults.executor == "process",
    help="Uses every CPU core. Same result for the same seed.",
)
seed = st.sidebar.number_input("Seed (0 for random)", min_value=0, value=0)
show_unsatisfied = st.sidebar.checkbox("Show unsatisfied preferences in the mind map", value=False)

# -----------------------------
# Main UI and previews
# -----------------------------

st.title("Seating Annealer")

_people_file = st.file_uploader("People CSV", type="csv")
_tables_file = st.file_uploader("Tables CSV", type="csv")
_companions_file = st.file_uploader("Companions CSV (optional)", type="csv")

people_df = tables_df = companions_df = None
people_valid = tables_valid = companions_valid = False

if _people_file is not None:
    people_df = pd.read_csv(_people_file)
    st.subheader("People preview")
    st.dataframe(people_df, use_container_width=True)
    people_valid = validate_columns(people_df, ["name"], "people.csv")
    _people_file.seek(0)

if _tables_file is not None:
    tables_df = pd.read_csv(_tables_file)
    st.subheader("Tables preview")
    st.dataframe(tables_df, use_container_width=True)
    tables_valid = validate_columns(tables_df, ["capacity"], "tables.csv")
    _tables_file.seek(0)

if _companions_file is not None:
    companions_df = pd.read_csv(_companions_file)
    st.subheader("Companions preview")
    st.dataframe(companions_df, use_container_width=True)
    companions_valid = validate_columns(companions_df, ["person_one", "person_two"], "companions.csv")
    _companions_file.seek(0)

if people_valid and tables_valid:
    validate_headcount(people_df, tables_df)

# -----------------------------
# Run button
# -----------------------------

run_disabled = not (_people_file and _tables_file)
run_clicked = st.button("Run annealer", disabled=run_disabled, key="run_annealer_button")

# -----------------------------
# Solve
# -----------------------------

if run_clicked and not run_disabled:
    try:
        people_df_run = uploadedfile_to_df(_people_file)
        tables_df_run = uploadedfile_to_df(_tables_file)
        companions_df_run = uploadedfile_to_df(_companions_file)

        if people_df_run is None or tables_df_run is None:
            st.error("One or more input files could not be read. Please upload valid CSV files.")
            st.stop()

        if not validate_columns(people_df_run, ["name"], "people.csv"):
            st.stop()
        if not validate_columns(tables_df_run, ["capacity"], "tables.csv"):
            st.stop()
        if companions_df_run is not None and not companions_valid:
            st.stop()
        if not validate_headcount(people_df_run, tables_df_run):
            st.stop()

        config = AnnealConfig(
            objective=ObjectiveKind.parse(objective),
            base_temperature=float(base_temperature),
            final_temperature=float(final_temperature),
            cooling_rate=float(cooling_rate),
            internal_iterations=int(internal_iterations),
            swap_count=int(swap_count),
            ladder_size=int(ladder_size),
            seed=int(seed) or None,
            executor="process" if use_processes else "thread",
        )
        with st.spinner("Annealing..."):
            problem, result = build_and_solve(people_df_run, tables_df_run, companions_df_run, config)
        companions = problem.companion_map()

        summary = summarize(result.assignment, companions)
        c1, c2, c3 = st.columns(3)
        c1.metric("People with a preference", summary.people_with_preference)
        c2.metric("People without", len(problem.people) - summary.people_with_preference)
        c3.metric("Preferences satisfied", summary.preferences_met)
        if summary.companion_violations:
            st.warning(f"{summary.companion_violations} people are not seated with their companion.")

        # Results table
        result_df = pd.DataFrame(
            [
                {"person": p.name, "table": index}
                for index, table in enumerate(result.assignment.tables)
                for p in table.occupants
            ]
        )
        st.subheader("Assignments")
        st.dataframe(result_df, use_container_width=True)

        st.subheader("Table report")
        st.dataframe(pd.DataFrame(table_report(result.assignment, companions)), use_container_width=True)

        st.subheader("Coldest annealer score per round")
        st.line_chart(pd.DataFrame({"score": result.history}))

        # Download
        csv_bytes = result_df.to_csv(index=False).encode("utf-8")
        st.download_button(
            "Download assignments as CSV",
            csv_bytes,
            file_name="assignments.csv",
        )

        # Mind map visualization
        st.subheader("Seating Mind Map")
        from seating_annealer.mind_map import generate_assignment_mind_map
        html = generate_assignment_mind_map(result.assignment, companions, show_unsatisfied_edges=show_unsatisfied)
        components.html(html, height=600, scrolling=True)

    except ValueError as e:
        st.error(f"Input validation error: {e}")
        st.stop()
    except Exception as e:
        st.exception(e)
        st.stop()
