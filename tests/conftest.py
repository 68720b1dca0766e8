from pathlib import Path
import sqlite3
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.ports import (
    CompletionError,
    EmbedderPort,
    EmbeddingError,
    IndexQueryError,
    LLMPort,
    QueryError,
    RelationalStorePort,
    VectorStorePort,
)


class StubEmbedder(EmbedderPort):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def embed_query(self, text):
        self.calls.append(text)
        if self.fail:
            raise EmbeddingError("quota exceeded")
        return [0.1, 0.2, 0.3]


class StubVectorStore(VectorStorePort):
    def __init__(self, hits=None, fail: bool = False):
        self.hits = list(hits or [])
        self.fail = fail
        self.calls = []

    def query(self, vector, top_k, include_metadata=True, filter=None):
        self.calls.append({"top_k": top_k, "include_metadata": include_metadata, "filter": filter})
        if self.fail:
            raise IndexQueryError("index unreachable")
        return self.hits[:top_k]


class StubSQL(RelationalStorePort):
    def __init__(self, rows=None, fail: bool = False):
        self.rows = list(rows or [])
        self.fail = fail
        self.calls = []

    def query(self, sql, params=()):
        self.calls.append((sql, list(params)))
        if self.fail:
            raise QueryError("database is locked")
        return list(self.rows)


class StubLLM(LLMPort):
    """Replies are chosen by a keyword of the system prompt; unmatched prompts get `default`."""

    def __init__(self, replies=None, default="", fail_on=()):
        self.replies = dict(replies or {})
        self.default = default
        self.fail_on = tuple(fail_on)
        self.calls = []

    def chat(self, system, user, temperature, max_tokens):
        self.calls.append((system, user))
        for key in self.fail_on:
            if key in system:
                raise CompletionError(f"{key} failed")
        for key, reply in self.replies.items():
            if key in system:
                return reply, {}
        return self.default, {}


def make_hit(name, score=0.8, *, yale=True, pid=None, **metadata):
    md = {
        "name": name,
        "latest_position": "Analyst",
        "current_company": "Acme",
        "city": "New York",
        "linkedin_url": f"https://linkedin.com/in/{name.lower().replace(' ', '-')}",
        "yale_major": "Economics",
        "yale_class": "2019",
        "education_1": "Yale University" if yale else "Harvard University",
        "text_snippet": f"{name} profile",
    }
    md.update(metadata)
    return {"id": pid or name, "score": score, "metadata": md}


def make_row(name, **overrides):
    row = {
        "person_id": name.lower().replace(" ", "-"),
        "name": name,
        "position": "Software Engineer",
        "location": "San Francisco",
        "url": "",
        "connections": 500,
        "current_company_name": "Stripe",
        "field": "Computer Science",
        "end_year": 2018,
    }
    row.update(overrides)
    return row


@pytest.fixture
def stubs():
    return StubEmbedder(), StubVectorStore(), StubSQL()


@pytest.fixture
def alumni_db(tmp_path):
    """Small people / educations / experiences database on disk."""
    path = tmp_path / "yale.db"
    conn = sqlite3.connect(path)
    conn.executescript(
        """
        CREATE TABLE people (
            person_id TEXT PRIMARY KEY, name TEXT, position TEXT, location TEXT,
            url TEXT, connections INTEGER, current_company_name TEXT, about TEXT
        );
        CREATE TABLE educations (
            person_id TEXT, title TEXT, degree TEXT, field TEXT, start_year INTEGER, end_year INTEGER
        );
        CREATE TABLE experiences (
            person_id TEXT, company TEXT, title TEXT, start_date TEXT, end_date TEXT,
            location TEXT, description TEXT
        );
        INSERT INTO people VALUES
            ('p1', 'Ada Park', 'Senior Product Manager', 'New York', 'https://li/ada', 900, 'Stripe', 'Payments'),
            ('p2', 'Ben Cole', 'Data Analyst', 'Boston', 'https://li/ben', 300, 'Goldman Sachs', NULL),
            ('p3', 'Cara Diaz', 'Software Engineer', 'New York', 'https://li/cara', 700, 'Stripe', NULL),
            ('p4', 'Dan Evans', 'VP Engineering', 'Seattle', 'https://li/dan', 1200, 'Stripe', NULL),
            ('p5', 'Eve Fox', 'Research Scientist', 'Cambridge', 'https://li/eve', 100, NULL, NULL);
        INSERT INTO educations VALUES
            ('p1', 'Yale University', 'Bachelor of Arts', 'Economics', 2010, 2014),
            ('p2', 'Yale University', 'Bachelor of Science', 'Statistics', 2015, 2019),
            ('p3', 'Yale University', NULL, 'Computer Science', 2012, 2016),
            ('p4', 'Stanford University', 'Master of Science', 'Computer Science', 2005, 2007),
            ('p5', 'Yale University', 'PhD', 'Biology', 2010, 2016);
        INSERT INTO experiences VALUES
            ('p1', 'Stripe', 'Senior Product Manager', '2019-01', 'Present', 'New York', NULL),
            ('p1', 'McKinsey', 'Business Analyst', '2014-07', '2018-12', 'New York', NULL),
            ('p2', 'Goldman Sachs', 'Data Analyst', '2019-08', NULL, 'Boston', NULL),
            ('p3', 'Stripe', 'Software Engineer', '2016-09', 'Present', 'New York', NULL),
            ('p4', 'Google', 'Engineering Manager', '2012-01', '2018-06', 'Seattle', NULL),
            ('p4', 'Stripe', 'VP Engineering', '2018-07', 'Present', 'Seattle', NULL);
        """
    )
    conn.commit()
    conn.close()
    return path
