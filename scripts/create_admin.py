import argparse
import logging
import os
import sys

from sqlalchemy.orm import Session

# Ensure we can import hiring_engine modules
sys.path.append(os.getcwd())

from hiring_engine.database import SessionLocal, init_db
from hiring_engine.models.user import User, UserRole
from hiring_engine.services.auth import get_password_hash

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def create_admin_user(email: str, password: str, full_name: str = "System Administrator") -> int:
    init_db()
    db: Session = SessionLocal()
    try:
        email = email.lower()
        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            if existing_user.role == UserRole.ADMIN and existing_user.is_active:
                logger.warning(f"Admin user '{email}' already exists.")
                return 0
            existing_user.role = UserRole.ADMIN
            existing_user.is_active = True
            db.commit()
            logger.info(f"User '{email}' promoted to admin.")
            return 0

        admin_user = User(
            email=email,
            hashed_password=get_password_hash(password),
            full_name=full_name,
            role=UserRole.ADMIN,
            is_active=True,
        )
        db.add(admin_user)
        db.commit()
        db.refresh(admin_user)

        logger.info(f"Admin user {admin_user.id} created. You can now login as {email}.")
        return 0

    except Exception as e:
        logger.error(f"Error creating admin user: {e}")
        db.rollback()
        return 1
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote an admin account.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--full-name", default="System Administrator")
    args = parser.parse_args(argv)

    if len(args.password) < 6:
        parser.error("password must be at least 6 characters")
    return create_admin_user(args.email, args.password, args.full_name)


if __name__ == "__main__":
    sys.exit(main())
