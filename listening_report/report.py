import os
import sys
import logging
import textwrap
from dataclasses import dataclass
from typing import Optional

import pandas as pd
import seaborn as sns
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages

from listening_report.analysis import month_labels, monthly_minutes, top_artists
from listening_report.config import ReportSettings, get_settings
from listening_report.data_processing import load_streaming_history, qualified_listens, save_csv
from listening_report.exceptions import ListeningDataError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg")


@dataclass
class ListeningReport:
    """Everything the presenter needs from one run of the pipeline"""
    events: pd.DataFrame
    listens: pd.DataFrame
    top_artists: pd.DataFrame
    monthly_minutes: pd.Series


def attach_artist_images(ranking, images_dir):
    """Add an `image` column pointing at <artist>.png/.jpg in images_dir, or None."""
    def find_image(artist):
        for ext in IMAGE_EXTENSIONS:
            path = os.path.join(images_dir, artist + ext)
            if os.path.isfile(path):
                return path
        return None

    ranking = ranking.copy()
    ranking["image"] = pd.Series([find_image(a) for a in ranking["artistName"]], index=ranking.index, dtype=object)
    return ranking


def build_report(settings: Optional[ReportSettings] = None) -> ListeningReport:
    settings = settings or get_settings()

    events = load_streaming_history(settings.data_dir, settings.history_pattern, strict=settings.strict)
    listens = qualified_listens(events)

    ranking = top_artists(listens, settings.top_n)
    if settings.artist_images_dir:
        ranking = attach_artist_images(ranking, settings.artist_images_dir)

    monthly = monthly_minutes(events, zero_fill=settings.zero_fill_months)
    return ListeningReport(events=events, listens=listens, top_artists=ranking, monthly_minutes=monthly)


def narrative(report: ListeningReport):
    """Prose paragraphs summarizing the report."""
    events = report.events
    if events.empty:
        return ["The export contains no plays."]

    total_minutes = events["msPlayed"].sum() / 60000.0
    paragraphs = [
        f"The export holds {len(events):,} plays between {events['endTime'].min():%d %B %Y} and "
        f"{events['endTime'].max():%d %B %Y}, adding up to {total_minutes:,.0f} minutes "
        f"({total_minutes / 60:,.1f} hours) of music."
    ]

    share = len(report.listens) / len(events) * 100
    paragraphs.append(
        f"{len(report.listens):,} of those plays ({share:.1f}%) count as real listens, meaning the song "
        f"ran for at least half of its longest recorded play."
    )

    if not report.top_artists.empty:
        leader = report.top_artists.iloc[0]
        others = ", ".join(report.top_artists["artistName"].iloc[1:4])
        sentence = f"{leader['artistName']} leads the ranking with {leader['listens']:,} listens"
        paragraphs.append(sentence + (f", followed by {others}." if others else "."))

    played = report.monthly_minutes[report.monthly_minutes > 0]
    if not played.empty:
        labelled = month_labels(played)
        paragraphs.append(
            f"{labelled.idxmax()} was the busiest month at {labelled.max():,.0f} minutes, "
            f"while {labelled.idxmin()} was the quietest at {labelled.min():,.0f} minutes."
        )
    return paragraphs


def plot_top_artists(ax, ranking):
    if ranking.empty:
        ax.text(0.5, 0.5, "No qualified listens", ha="center", va="center")
        ax.set_axis_off()
        return ax
    sns.barplot(data=ranking, x="listens", y="artistName", color="skyblue", ax=ax)
    ax.set_xlabel("Listens")
    ax.set_ylabel("Artist")
    ax.set_title(f"Top {len(ranking)} Artists by Listens")
    ax.grid(axis="x", alpha=0.3)
    return ax


def plot_monthly_minutes(ax, monthly):
    labelled = month_labels(monthly)
    ax.plot(range(len(labelled)), labelled.values, marker="o", color="lightgreen")
    ax.set_xticks(range(len(labelled)))
    ax.set_xticklabels([month[:3] for month in labelled.index], rotation=45)
    ax.set_xlabel("Month")
    ax.set_ylabel("Total Minutes Played")
    ax.set_title("Listening Time by Month")
    ax.grid(axis="y", alpha=0.3)
    return ax


def write_pdf(report: ListeningReport, out_path="output/listening_report.pdf"):
    out_dir = os.path.dirname(out_path)
    if out_dir and not os.path.exists(out_dir):
        os.makedirs(out_dir)

    with PdfPages(out_path) as pdf:
        fig = plt.figure(figsize=(8.5, 11))
        fig.text(0.08, 0.94, "A Year of Listening", fontsize=20, weight="bold")
        body = "\n\n".join(textwrap.fill(p, width=80) for p in narrative(report))
        fig.text(0.08, 0.90, body, fontsize=11, va="top")
        pdf.savefig(fig)
        plt.close(fig)

        fig, ax = plt.subplots(figsize=(11, 6))
        plot_top_artists(ax, report.top_artists)
        fig.tight_layout()
        pdf.savefig(fig)
        plt.close(fig)

        fig, ax = plt.subplots(figsize=(11, 6))
        plot_monthly_minutes(ax, report.monthly_minutes)
        fig.tight_layout()
        pdf.savefig(fig)
        plt.close(fig)

    logger.info(f"Saved report to: {out_path}")
    return out_path


def main():
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    settings = get_settings()
    sns.set_theme(style="whitegrid")

    try:
        report = build_report(settings)
    except (ListeningDataError, FileNotFoundError) as e:
        logger.error(f"Could not build report: {e}")
        sys.exit(1)

    out = settings.output_dir
    save_csv(report.listens.drop(columns=["trackKey"]), os.path.join(out, "qualified_listens.csv"))
    save_csv(report.top_artists, os.path.join(out, "top_artists.csv"))
    save_csv(report.monthly_minutes.reset_index(), os.path.join(out, "monthly_minutes.csv"))
    write_pdf(report, os.path.join(out, "listening_report.pdf"))


if __name__ == "__main__":
    main()
