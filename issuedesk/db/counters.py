from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from issuedesk.models.counter import Counter

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def next_id(db: Session, collection: str) -> int:
    """Increment and return the sequence for ``collection`` in one statement.

    The counter row is created on first use, so the first id handed out is 1.
    Concurrent callers serialise on the row lock held by the upsert and never
    see the same value.
    """
    dialect = db.get_bind().dialect.name
    insert = _UPSERT_DIALECTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"Sequential ids are not supported on {dialect}")
    stmt = (
        insert(Counter)
        .values(name=collection, seq=1)
        .on_conflict_do_update(
            index_elements=[Counter.name], set_={"seq": Counter.seq + 1}
        )
        .returning(Counter.seq)
    )
    return int(db.execute(stmt).scalar_one())
