# seed.py
import os
import logging
from server.models import db, User

logger = logging.getLogger(__name__)


def seed():
    """Create the first admin account from ADMIN_EMAIL/ADMIN_PASSWORD if none exists."""
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin seed")
        return None

    admin = User.query.filter_by(email=email.strip().lower()).first()
    if admin:
        return admin

    admin = User(
        name=os.getenv("ADMIN_NAME", "Masjid Admin"),
        email=email.strip().lower(),
        role="admin",
    )
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    logger.info(f"Seeded admin account {admin.email}")
    return admin
