from sqlalchemy import select, func
from atelier import get_db
from atelier.models.catalog import Piece
from atelier.models.user import User
from scripts.seed_workshop import ensure_admin, ensure_catalog, parse_args
from seeds.catalog import PIECES


def test_seed_is_idempotent(monkeypatch):
    monkeypatch.setenv('SEED_ADMIN_NAME', 'seed-admin')
    session = get_db()
    ensure_admin(session)
    ensure_catalog(session)
    session.commit()
    assert ensure_admin(session) == 0
    assert ensure_catalog(session) == 0
    admin = session.execute(select(User).where(User.name == 'seed-admin')).scalar_one()
    assert admin.role == 'admin'
    refs = [ref for _, ref, _ in PIECES]
    count = session.execute(select(func.count(Piece.id)).where(Piece.reference_article.in_(refs))).scalar_one()
    assert count == len(PIECES)


def test_seed_arguments():
    args = parse_args(['--dry-run'])
    assert args.dry_run and not args.no_catalog
