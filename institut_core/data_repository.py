import logging
from functools import lru_cache  # Cache standard pour l'engine

import pandas as pd
from sqlalchemy import create_engine, text
from sqlalchemy.sql.elements import ClauseElement, TextClause
from sqlalchemy.engine import Engine

from .database_url import get_database_url, normalize_url
from .settings import AppSettings

SETTINGS = AppSettings.load()
DATABASE_URL = normalize_url(SETTINGS.database_url) if SETTINGS.database_url else get_database_url()
POOL_SIZE = SETTINGS.db_pool_size
POOL_MAX_OVERFLOW = SETTINGS.db_pool_max_overflow

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Retourne le moteur SQLAlchemy, mis en cache via functools."""
    # Certains dialectes (ex: sqlite memory) n'acceptent pas pool_size/max_overflow.
    kwargs = {"pool_pre_ping": True}
    if not DATABASE_URL.startswith("sqlite"):
        kwargs.update(
            {
                "pool_size": max(1, POOL_SIZE),
                "max_overflow": max(0, POOL_MAX_OVERFLOW),
            }
        )
    logger.debug("Création de l'engine SQLAlchemy (pool=%s)", kwargs.get("pool_size"))
    return create_engine(DATABASE_URL, **kwargs)


def quote_table(name: str) -> str:
    """Les tables dd-* contiennent des tirets : elles doivent être citées."""
    if '"' in name:
        raise ValueError(f"Nom de table invalide : {name}")
    return f'"{name}"'


def _normalize_statement(sql: str | ClauseElement) -> ClauseElement:
    if isinstance(sql, str):
        return text(sql)
    if isinstance(sql, ClauseElement):
        return sql
    raise TypeError("sql must be a string or SQLAlchemy ClauseElement")


def query_df(sql: str | ClauseElement, params=None) -> pd.DataFrame:
    """Exécute une requête SELECT et retourne le résultat sous forme de DataFrame Pandas."""
    statement = _normalize_statement(sql)
    if params is not None and not isinstance(params, dict):
        raise TypeError("params must be a mapping when provided")

    # Pré-lie les paramètres pour simplifier le repli en cas d'erreur driver
    bound_statement = statement.bindparams(**params) if params else statement

    eng = get_engine()
    with eng.begin() as conn:
        try:
            result = conn.execute(bound_statement)
        except TypeError as exc:
            # Certains drivers exigent une chaîne brute : on recompile avec valeurs littérales.
            if isinstance(bound_statement, TextClause):
                compiled = bound_statement.compile(compile_kwargs={"literal_binds": True})
                result = conn.exec_driver_sql(str(compiled))
            else:
                raise exc

        columns = list(result.keys())
        rows = result.fetchall()

        if not rows:
            return pd.DataFrame(columns=columns)

        return pd.DataFrame([tuple(row) for row in rows], columns=columns)


def df_records(df: pd.DataFrame) -> list[dict]:
    """Convertit un DataFrame en liste de dicts JSON-compatibles (NaN -> None)."""
    if df is None or df.empty:
        return []
    cleaned = df.astype(object).where(pd.notna(df), None)
    return cleaned.to_dict(orient="records")
