import pandas as pd

from pjtboard.preprocess import REQUIRED_COLS, preprocess_cost_history, read_table


def test_headers_are_aliased_and_values_coerced():
    df = pd.DataFrame({
        "Date": ["2024-02-01", "2024.03.01", "not a date"],
        "Budget": ["1,000,000", "junk", "5"],
        "Actual Cost": ["250000", "-5", "1"],
        "담당자": [" Kim ", None, "Lee"],
    })
    out = preprocess_cost_history(df)
    assert list(out.columns) == REQUIRED_COLS
    assert len(out) == 2
    assert out["date"].tolist() == ["2024-02-01", "2024-03-01"]
    assert out["budget"].tolist() == [1_000_000, 0]
    assert out["actualCost"].tolist() == [250_000, 0]
    assert out["manager"].tolist() == ["Kim", ""]
    assert out["note"].tolist() == ["", ""]


def test_duplicate_columns_are_collapsed():
    df = pd.DataFrame([["2024-01-01", None, "500", "100"]], columns=["date", "Budget", "예산", "actual_cost"])
    out = preprocess_cost_history(df)
    assert out.loc[0, "budget"] == 500
    assert out.loc[0, "actualCost"] == 100


def test_read_table_tab_and_comma():
    tab = read_table(b"date\tbudget\tactualCost\n2024-01-01\t100\t50\n")
    comma = read_table(b"date,budget,actualCost\n2024-01-01,100,50\n")
    assert list(tab.columns) == ["date", "budget", "actualCost"]
    assert list(comma.columns) == ["date", "budget", "actualCost"]
    assert comma.loc[0, "budget"] == "100"
