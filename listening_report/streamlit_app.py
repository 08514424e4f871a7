import os
import pandas as pd
import streamlit as st
import plotly.express as px

from listening_report.analysis import month_labels, top_artists
from listening_report.config import get_settings


OUTPUT_DIR = get_settings().output_dir
LISTENS_PATH = os.path.join(OUTPUT_DIR, "qualified_listens.csv")
MONTHLY_PATH = os.path.join(OUTPUT_DIR, "monthly_minutes.csv")


@st.cache_data
def load_listens(path=LISTENS_PATH):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Processed listens not found at {path}. Run listening-report first.")
    return pd.read_csv(
        path, parse_dates=["endTime"], dtype={"artistName": str, "trackName": str}, keep_default_na=False
    )


@st.cache_data
def load_monthly(path=MONTHLY_PATH):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Monthly minutes not found at {path}. Run listening-report first.")
    return pd.read_csv(path, index_col="month")["minutesPlayed"]


def top_artists_figure(listens, top_n=10):
    ranking = top_artists(listens, top_n)
    fig = px.bar(ranking, x="listens", y="artistName", orientation="h", title=f"Top {len(ranking)} Artists by Listens")
    fig.update_yaxes(autorange="reversed")
    return fig


def monthly_minutes_figure(monthly):
    labelled = month_labels(monthly).reset_index()
    return px.line(labelled, x="month_name", y="minutesPlayed", markers=True, title="Listening Time by Month")


def main():
    st.title("Spotify Listening Report")
    st.sidebar.header("Filters")
    listens = load_listens()
    monthly = load_monthly()

    top_n = st.sidebar.slider("Top N artists", 5, 50, 10)

    st.header("Top Artists")
    st.caption("A play counts as a listen once it reaches half of the song's longest recorded play.")
    st.plotly_chart(top_artists_figure(listens, top_n), use_container_width=True)

    st.header("Listening Over the Year")
    st.plotly_chart(monthly_minutes_figure(monthly), use_container_width=True)


if __name__ == "__main__":
    main()
