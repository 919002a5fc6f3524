import json
from unittest.mock import patch

import pandas as pd
import pytest

from lawsearch import cli


def test_load_queries_requires_query_column(tmp_path):
    path = tmp_path / "q.csv"
    pd.DataFrame({"Question": ["water"]}).to_csv(path, index=False)
    with pytest.raises(ValueError):
        cli.load_queries(path)


def test_load_queries_cleans_and_skips_blanks(tmp_path):
    path = tmp_path / "q.csv"
    pd.DataFrame({"query": ["  water  law ", None, "tax"]}).to_csv(path, index=False)
    assert cli.load_queries(path) == ["water law", "tax"]


@pytest.mark.asyncio
async def test_run_batch_runs_each_unique_query_once(context):
    with patch.object(cli, "process", wraps=cli.process) as spy:
        preds = await cli.run_batch(["water", "tax", "water"], context, None)
    assert spy.call_count == 2
    assert list(preds) == ["water", "tax"]
    assert preds["water"][0].name == "Water Law"


def test_main_offline_writes_flat_csv(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "library-resources-database.catalog.json").write_text(
        json.dumps([{"name": "Water Law", "url": "guides.law.byu.edu/water"}]), encoding="utf-8"
    )
    inp = tmp_path / "queries.csv"
    pd.DataFrame({"Query": ["water", "water"]}).to_csv(inp, index=False)
    out = tmp_path / "out" / "results.csv"

    cli.main(["--in", str(inp), "--out", str(out), "--data-dir", str(data_dir), "--offline"])

    df = pd.read_csv(out)
    assert list(df.columns) == ["Query", "Name", "RelevanceScore", "Url"]
    assert df.iloc[0]["Name"] == "Water Law"
    assert df.iloc[0]["Url"] == "https://guides.law.byu.edu/water"
