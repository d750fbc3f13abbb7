import re
from io import BytesIO

import pandas as pd

# Canonical columns of an ingested cost history
REQUIRED_COLS = [
    "date",
    "budget",
    "actualCost",
    "note",
    "manager",
    "changeReason",
]

# Header aliases (case/space/underscore-insensitive)
HEADER_ALIASES = {
    # date
    "date": "date",
    "record date": "date",
    "날짜": "date",
    "일자": "date",

    # budget
    "budget": "budget",
    "예산": "budget",

    # actual cost
    "actualcost": "actualCost",
    "actual cost": "actualCost",
    "actual": "actualCost",
    "cost": "actualCost",
    "실제비용": "actualCost",
    "실제 비용": "actualCost",

    # free text
    "note": "note",
    "notes": "note",
    "비고": "note",
    "manager": "manager",
    "담당자": "manager",
    "changereason": "changeReason",
    "change reason": "changeReason",
    "변경 사유": "changeReason",
    "변경사유": "changeReason",
}

TEXT_COLS = ["note", "manager", "changeReason"]
DATE_FORMATS = ("%Y-%m-%d", "%Y.%m.%d", "%Y/%m/%d", "%d.%m.%Y")


def _normalize_col(c: str) -> str:
    c = (c or "").strip()
    c = re.sub(r"\s+", " ", c)
    key = c.lower().replace("_", " ")
    key = re.sub(r"\s+", " ", key).strip()
    return HEADER_ALIASES.get(key, c)


def _coerce_amount(series: pd.Series) -> pd.Series:
    cleaned = series.astype(str).str.replace(r"[,\s₩$€]", "", regex=True)
    return pd.to_numeric(cleaned, errors="coerce").fillna(0).clip(lower=0).round(0).astype(int)


def _coerce_dates(series: pd.Series) -> pd.Series:
    s = series.astype(str).str.strip()
    out = pd.Series(pd.NaT, index=s.index, dtype="datetime64[ns]")
    for fmt in DATE_FORMATS:
        missing = out.isna()
        if not missing.any():
            break
        out[missing] = pd.to_datetime(s[missing], format=fmt, errors="coerce")
    return out.dt.strftime("%Y-%m-%d")


def _collapse_duplicate_columns(df: pd.DataFrame, colname: str) -> pd.DataFrame:
    """
    If several columns share one name after aliasing (e.g. 'Budget' and '예산'),
    keep a single column holding the first non-null value across them.
    """
    same = [c for c in df.columns if c == colname]
    if len(same) <= 1:
        return df
    combined = df.loc[:, df.columns == colname].bfill(axis=1).iloc[:, 0]
    df = df.loc[:, df.columns != colname].copy()
    df[colname] = combined
    return df


def read_table(content: bytes) -> pd.DataFrame:
    """Tab-separated first, comma-separated as fallback."""
    try:
        df = pd.read_csv(BytesIO(content), sep="\t", dtype=str)
        if df.shape[1] == 1:
            raise ValueError("fallback to comma")
    except (ValueError, pd.errors.ParserError):
        df = pd.read_csv(BytesIO(content), sep=",", dtype=str)
    return df


def preprocess_cost_history(df: pd.DataFrame) -> pd.DataFrame:
    # 1) Normalize column names
    df = df.rename(columns={c: _normalize_col(c) for c in df.columns})

    # 2) Collapse duplicates for the canonical columns
    for key in REQUIRED_COLS:
        df = _collapse_duplicate_columns(df, key)

    # 3) Ensure required columns exist (create empty if missing)
    for rc in REQUIRED_COLS:
        if rc not in df.columns:
            df[rc] = ""

    # 4) Amounts: non-negative integers, junk -> 0
    df["budget"] = _coerce_amount(df["budget"])
    df["actualCost"] = _coerce_amount(df["actualCost"])

    # 5) Dates: canonical YYYY-MM-DD; rows without a usable date are dropped
    df["date"] = _coerce_dates(df["date"])
    df = df[df["date"].notna()].copy()

    # 6) Trim text fields
    for col in TEXT_COLS:
        df[col] = df[col].fillna("").astype(str).str.strip()

    return df[REQUIRED_COLS].reset_index(drop=True)
