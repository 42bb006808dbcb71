#!/usr/bin/env python
"""Idempotent seed script for the workshop: admin account + catalog.

Usage:
    python backend/scripts/seed_workshop.py               # seed normally
    python backend/scripts/seed_workshop.py --dry-run     # run logic then rollback (no DB changes)
    python backend/scripts/seed_workshop.py --no-catalog  # admin account only
"""
from __future__ import annotations
import os, sys, argparse, textwrap, logging
from sqlalchemy import select, inspect

# Allow running from anywhere
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from atelier import create_app, get_db  # type: ignore
from atelier.constants.roles import ROLE_ADMIN
from atelier.models.base import Base
from atelier.models.catalog import Client, Etrier, Piece
from atelier.models.user import User
from seeds.catalog import CLIENTS, ETRIERS, PIECES

logger = logging.getLogger('atelier.seed')


def ensure_admin(session):
    name = os.getenv('SEED_ADMIN_NAME', 'admin')
    if session.execute(select(User).where(User.name==name)).scalar_one_or_none():
        return 0
    user = User(name=name, role=ROLE_ADMIN)
    user.set_password(os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
    session.add(user)
    logger.info('created admin account %s with temporary password', name)
    return 1


def ensure_catalog(session):
    created = 0
    clients = set(session.execute(select(Client.name)).scalars().all())
    for row in CLIENTS:
        if row['name'] not in clients:
            session.add(Client(**row))
            created += 1
    models = set(session.execute(select(Etrier.car_model)).scalars().all())
    for car_model in ETRIERS:
        if car_model not in models:
            session.add(Etrier(car_model=car_model))
            created += 1
    refs = set(session.execute(select(Piece.reference_article)).scalars().all())
    for designation, ref, bar_code in PIECES:
        if ref not in refs:
            session.add(Piece(designation=designation, reference_article=ref, bar_code=bar_code))
            created += 1
    return created


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Seed the workshop admin account and catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_workshop.py\n  dry run: seed_workshop.py --dry-run\n""")
    )
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--no-catalog', action='store_true', help='Only ensure the admin account')
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    app = create_app()
    with app.app_context():
        session = get_db()
        engine = session.get_bind()
        if not inspect(engine).has_table('users'):
            # Bootstrap without migrations; in real env prefer alembic upgrade
            Base.metadata.create_all(engine)
        try:
            created_admin = ensure_admin(session)
            created_catalog = 0 if args.no_catalog else ensure_catalog(session)
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) admin would create: {created_admin}, catalog rows would create: {created_catalog}")
            else:
                session.commit()
                print(f"[DONE] admin created: {created_admin}, catalog rows created: {created_catalog}")
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
    return 0

if __name__ == '__main__':
    sys.exit(main())
