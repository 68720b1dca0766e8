import json

from app.services.search import AlumniSearch
from conftest import StubEmbedder, StubSQL, StubVectorStore, make_hit, make_row
from scripts.query_alumni import main


def _search(hits=(), rows=()):
    return AlumniSearch(StubEmbedder(), StubVectorStore(list(hits)), StubSQL(list(rows)))


def test_query_cli_pretty_output(capsys):
    outcome = main(["--q", "fintech", "--major", "Economics", "--show-reason"], search=_search([make_hit("Ada Park", 0.87)]))
    out = capsys.readouterr().out.splitlines()
    assert outcome.source == "vector"
    assert out[0].startswith(" 1  87.0  Ada Park | Analyst at Acme | Economics '19 [vector]")
    assert out[1].strip().startswith("Relevant to: fintech Yale alumni Economics")


def test_query_cli_json_lines(capsys):
    main(["--q", "stripe", "--json"], search=_search([], [make_row("Cara Diaz")]))
    lines = capsys.readouterr().out.strip().splitlines()
    payload = json.loads(lines[0])
    assert payload["name"] == "Cara Diaz"
    assert payload["source"] == "relational"


def test_query_cli_reports_no_results(capsys):
    main(["--q", "nothing"], search=_search())
    assert "No alumni found for: nothing Yale alumni" in capsys.readouterr().out
