from __future__ import annotations

import os
import sqlite3
import sys
from pathlib import Path

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'pipelines.steps.validate_files'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


PROFILE_CSV = (
    "First Name,Last Name,Maiden Name,Headline,Summary,Industry,Geo Location\n"
    "Ada,Lovelace,,Analyst at Engines,Writes notes on engines,Mathematics,London\n"
)

CONNECTIONS_CSV = (
    "Notes:\n"
    "\"When exporting your connection data, you may notice that some of the email addresses are missing.\"\n"
    "\n"
    "First Name,Last Name,URL,Email Address,Company,Position,Connected On\n"
    "Charles,Babbage,https://www.linkedin.com/in/charles-babbage,,Analytical Engines,Inventor,12 Mar 2024\n"
    "Mary,Somerville,https://www.linkedin.com/in/mary-somerville/,mary@example.com,Royal Society,Scientist,01 Jan 2023\n"
    "No,Url,,,,,\n"
)

POSITIONS_CSV = (
    "Company Name,Title,Description,Location,Started On,Finished On\n"
    "Analytical Engines,Analyst,,London,Jan 1842,\n"
    "Royal Society,Fellow,,,Mar 1840,Dec 1841\n"
)

EDUCATION_CSV = (
    "School Name,Start Date,End Date,Notes,Degree Name,Activities\n"
    "Private Tutoring,1830,1835,,Mathematics,\n"
)

SKILLS_CSV = "Name\nMathematics\nProgramming\n"


@pytest.fixture
def conn(tmp_path):
    from db import schema

    c = sqlite3.connect(str(tmp_path / "t.db"))
    try:
        schema.bootstrap(c)
        yield c
    finally:
        c.close()


@pytest.fixture
def export_texts():
    return {
        "Profile.csv": PROFILE_CSV,
        "Connections.csv": CONNECTIONS_CSV,
        "Positions.csv": POSITIONS_CSV,
        "Education.csv": EDUCATION_CSV,
        "Skills.csv": SKILLS_CSV,
    }


@pytest.fixture
def export_files(export_texts):
    from models.upload_file import UploadFile

    return [UploadFile(name=name, content=text) for name, text in export_texts.items()]
