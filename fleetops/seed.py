"""Bootstrap a fresh database: first admin account and the default checklist items.

Usage examples:
  - Create tables (no alembic) and seed:
      python -m fleetops.seed --create-tables --admin-email admin@fleet.local --admin-password Secret123

  - Seed only the checklist items on an existing database:
      python -m fleetops.seed --skip-admin
"""
import argparse
import logging
import os

from fleetops.database import Base, SessionLocal, engine
from fleetops.models.user import User, UserRole
from fleetops.schemas.user import UserCreateRequest
from fleetops.services.checklist_definition_service import checklist_definition_service
from fleetops.services.user_service import user_service

import fleetops.models  # noqa: F401  registers every table on Base.metadata

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("fleetops.seed")


def seed(admin_name: str, admin_email: str, admin_password: str | None, skip_admin: bool) -> None:
    db = SessionLocal()
    try:
        if checklist_definition_service.ensure_defaults(db):
            db.commit()
        else:
            logger.info("Checklist items already present, skipping")

        if skip_admin:
            return
        if db.query(User).filter(User.role == UserRole.ADMIN).first():
            logger.info("An admin account already exists, skipping")
            return
        if not admin_password:
            raise SystemExit("An admin password is required (--admin-password or ADMIN_PASSWORD)")

        data = UserCreateRequest(
            name=admin_name,
            email=admin_email,
            password=admin_password,
            role=UserRole.ADMIN,
        )
        admin = user_service.create_user(db, data, actor_id=None)
        logger.info(f"Created admin {admin['email']} ({admin['id']})")
    finally:
        db.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the fleet operations database")
    parser.add_argument("--create-tables", action="store_true",
                        help="Create missing tables from the models (instead of alembic upgrade)")
    parser.add_argument("--admin-name", default="Administrator")
    parser.add_argument("--admin-email", default=os.getenv("ADMIN_EMAIL", "admin@fleet.local"))
    parser.add_argument("--admin-password", default=os.getenv("ADMIN_PASSWORD"))
    parser.add_argument("--skip-admin", action="store_true")
    args = parser.parse_args()

    if args.create_tables:
        Base.metadata.create_all(bind=engine)
        logger.info("Tables created")

    seed(args.admin_name, args.admin_email, args.admin_password, args.skip_admin)


if __name__ == "__main__":
    main()
