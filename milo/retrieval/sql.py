"""
Parameterized SQL for the alumni dataset.
Search text never lands in the SQL string; every user-derived value goes through a `?` placeholder.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple

_ALUMNI_COLUMNS = """
    SELECT DISTINCT
        p.person_id,
        p.name,
        p.position,
        p.location,
        p.url,
        p.connections,
        p.current_company_name,
        e.field,
        e.end_year
    FROM people p
    JOIN educations e ON p.person_id = e.person_id
    WHERE LOWER(e.title) LIKE '%yale%'
      AND p.current_company_name IS NOT NULL
"""


def fallback_alumni_query(terms: Sequence[str], limit: int = 10) -> Tuple[str, List[Any]]:
    """Yale alumni whose role, field or company matches any term, best connected first."""
    sql = _ALUMNI_COLUMNS
    params: List[Any] = []
    if terms:
        clauses = []
        for term in terms:
            like = f"%{term}%"
            clauses.append(
                "(LOWER(p.position) LIKE ? OR LOWER(e.field) LIKE ? OR LOWER(p.current_company_name) LIKE ?)"
            )
            params.extend([like, like, like])
        sql += "      AND (" + " OR ".join(clauses) + ")\n"
    sql += "    ORDER BY p.connections DESC\n    LIMIT ?"
    params.append(int(limit))
    return sql, params


def company_alumni_query(company: str, limit: int = 5) -> Tuple[str, List[Any]]:
    """Yale alumni currently at `company`."""
    sql = (
        _ALUMNI_COLUMNS
        + "      AND LOWER(p.current_company_name) LIKE LOWER(?)\n"
        + "    ORDER BY p.connections DESC\n    LIMIT ?"
    )
    return sql, [f"%{company}%", int(limit)]


def company_history_query(company: str, limit: int = 10) -> Tuple[str, List[Any]]:
    """Anyone who has worked at `company`, by experience or current employer."""
    sql = """
    SELECT DISTINCT
        p.person_id,
        p.name,
        p.position,
        p.location,
        p.connections,
        p.about,
        p.url,
        p.current_company_name AS current_company,
        p.position AS current_title
    FROM people p
    JOIN experiences x ON p.person_id = x.person_id
    WHERE LOWER(x.company) LIKE LOWER(?)
       OR LOWER(p.current_company_name) LIKE LOWER(?)
    ORDER BY p.connections DESC
    LIMIT ?"""
    like = f"%{company}%"
    return sql, [like, like, int(limit)]


EXPERIENCES_SQL = """
    SELECT company, title, start_date, end_date, location, description
    FROM experiences
    WHERE person_id = ?
    ORDER BY
        CASE WHEN end_date = 'Present' OR end_date IS NULL THEN 1 ELSE 0 END DESC,
        end_date DESC"""

YALE_EDUCATION_SQL = """
    SELECT title, degree, field, start_year, end_year
    FROM educations
    WHERE person_id = ? AND LOWER(title) LIKE '%yale%'"""

# One row per (person, Yale education); people without one still appear with NULL education columns.
INDEX_PROFILES_SQL = """
    SELECT
        p.person_id,
        p.name,
        p.position,
        p.location,
        p.url,
        p.current_company_name,
        p.about,
        e.title AS education,
        e.degree,
        e.field,
        e.end_year
    FROM people p
    LEFT JOIN educations e
           ON e.person_id = p.person_id AND LOWER(e.title) LIKE '%yale%'
    ORDER BY p.person_id"""
